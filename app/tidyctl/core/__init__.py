"""Core services for tidyctl: paths, configuration, manifest I/O,
run history, locking, reporting and notifications."""
