"""tidyctl - Declarative file-lifecycle maintenance.

Purge aging files or relocate them with verified integrity, driven by
rules declared in a manifest.
"""

__version__ = "0.1.0"
