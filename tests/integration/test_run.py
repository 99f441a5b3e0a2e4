"""Integration tests: manifest file to filesystem effects and history."""

import hashlib
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from tidyctl.core.manifest import load_rules
from tidyctl.core.state import StateManager
from tidyctl.engine.dispatcher import RuleDispatcher
from tidyctl.models.history import create_run_record
from tidyctl.models.outcome import ResultKind


class TestManifestRun:
    """Run a realistic manifest end to end."""

    def test_purge_relocate_noop(
        self,
        tmp_path: Path,
        clock: Callable[[], datetime],
        make_file: Callable[..., Path],
    ) -> None:
        """Old temp files are purged, data is relocated, and the run is recorded."""
        scratch = tmp_path / "tmp"
        incoming = tmp_path / "src"
        archive = tmp_path / "dst"
        archive.mkdir()
        old = make_file(scratch / "a.tmp", age_days=40)
        young = make_file(scratch / "b.tmp", age_days=5)
        payload = b"quarterly report " * 500
        make_file(incoming / "c.dat", content=payload, age_days=1)

        manifest = tmp_path / "rules.csv"
        manifest.write_text(
            "operation,description,source,destination,ndays,filter\n"
            f"purge,old temp files,{scratch},,30,*.tmp\n"
            f"relocate,archive data,{incoming},{archive},0,*\n"
            "noop,placeholder,,,,\n"
        )

        rules = load_rules(manifest)
        result = RuleDispatcher(clock=clock, chunk_size=4096).run(rules)

        assert [(o.rule.index, o.result) for o in result.outcomes] == [
            (1, ResultKind.SUCCESS),
            (2, ResultKind.SUCCESS),
            (3, ResultKind.SKIPPED),
        ]
        assert result.exit_code == 0
        assert not old.exists()
        assert young.exists()
        assert not (incoming / "c.dat").exists()
        digest = hashlib.sha256((archive / "c.dat").read_bytes()).hexdigest()
        assert digest == hashlib.sha256(payload).hexdigest()

        state = StateManager()
        state.record_run(create_run_record(result, str(manifest)))
        (record,) = state.get_history()
        assert record.success is True
        assert record.rule_count == 3

    def test_partial_failure_isolated(
        self,
        tmp_path: Path,
        clock: Callable[[], datetime],
        make_file: Callable[..., Path],
    ) -> None:
        """A broken rule fails the run without stopping the others."""
        logs = tmp_path / "logs"
        stale = make_file(logs / "app.log", age_days=10)
        manifest = tmp_path / "manifest.toml"
        manifest.write_text(
            '[[rules]]\noperation = "relocate"\n'
            f'source = "{logs}"\ndestination = "{tmp_path / "missing"}"\n\n'
            '[[rules]]\noperation = "zap"\n\n'
            f'[[rules]]\noperation = "purge"\nsource = "{logs}"\nndays = 7\n'
        )

        result = RuleDispatcher(clock=clock).run(load_rules(manifest))

        assert [o.result for o in result.outcomes] == [
            ResultKind.IO_FAILURE,
            ResultKind.IO_FAILURE,
            ResultKind.SUCCESS,
        ]
        assert result.exit_code == 1
        assert not stale.exists()
