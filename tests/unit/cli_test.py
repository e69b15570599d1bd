"""Tests for the tracing-sync command line."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from tracing_sync.cli.app import app

runner = CliRunner()

_FIXED_MAIN = '#[tracing::instrument(level = "trace", skip())]\nfn main() { }'


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TRACING_SYNC_NAMESPACE", "TRACING_SYNC_STYLE", "TRACING_SYNC_SKIP_MARKER"):
        monkeypatch.delenv(name, raising=False)


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(text.encode("utf-8"))
    return path


@pytest.mark.parametrize(
    "args",
    [[], ["check"], ["fix"], ["strip"]],
    ids=["root", "check", "fix", "strip"],
)
def test_short_help_flag(args: list[str]) -> None:
    result = runner.invoke(app, [*args, "-h"])
    assert result.exit_code == 0
    assert "Usage" in result.output


class TestTextInput:
    def test_check_reports_missing(self) -> None:
        result = runner.invoke(app, ["check", "--text", "fn main() { }"])
        assert result.exit_code == 2
        assert "Missing instrumentation at 1:0." in result.output

    def test_check_clean(self) -> None:
        result = runner.invoke(app, ["check", "--text", "#[test]\nfn t() {}"])
        assert result.exit_code == 0
        assert result.output == ""

    def test_fix_prints_result(self) -> None:
        result = runner.invoke(app, ["fix", "--text", "fn main() { }"])
        assert result.exit_code == 0
        assert result.stdout == _FIXED_MAIN

    def test_fix_log_style(self) -> None:
        result = runner.invoke(app, ["fix", "--style", "log", "--text", "fn main() { }"])
        assert result.exit_code == 0
        assert result.stdout == "#[log_instrument::instrument]\nfn main() { }"

    def test_fix_suffix_alias(self) -> None:
        result = runner.invoke(app, ["fix", "--suffix", "", "--text", "fn main() { }"])
        assert result.exit_code == 0
        assert result.stdout == '#[instrument(level = "trace", skip())]\nfn main() { }'

    def test_strip_prints_result(self) -> None:
        result = runner.invoke(app, ["strip", "--text", _FIXED_MAIN])
        assert result.exit_code == 0
        assert result.stdout == "fn main() { }"

    def test_parse_error(self) -> None:
        result = runner.invoke(app, ["check", "--text", "fn main( {"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_invalid_namespace(self) -> None:
        result = runner.invoke(app, ["fix", "--namespace", "tracing", "--text", "fn main() { }"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_skip_marker_option(self) -> None:
        result = runner.invoke(app, ["check", "--skip-marker", "no_trace", "--text", "#[no_trace]\nfn main() { }"])
        assert result.exit_code == 0

    def test_skip_marker_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TRACING_SYNC_SKIP_MARKER", "no_trace")
        result = runner.invoke(app, ["check", "--text", "#[no_trace]\nfn main() { }"])
        assert result.exit_code == 0


class TestPathInput:
    def test_check_reports_file_location(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "one.rs", "impl One {\n    fn one() { }\n}")
        result = runner.invoke(app, ["check", "--path", str(path)])
        assert result.exit_code == 2
        assert f"Missing instrumentation at {path}:2:4." in result.output

    def test_check_clean_directory(self, tmp_path: Path) -> None:
        _write(tmp_path / "src" / "lib.rs", "#[clippy_tracing_skip]\nfn main() { }\n")
        _write(tmp_path / "build.rs", "fn main() { }\n")
        result = runner.invoke(app, ["check", "--path", str(tmp_path)])
        assert result.exit_code == 0

    def test_fix_rewrites_files(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "src" / "main.rs", "fn main() { }")
        result = runner.invoke(app, ["fix", "--path", str(tmp_path)])
        assert result.exit_code == 0
        assert result.output == ""
        assert path.read_text(encoding="utf-8") == _FIXED_MAIN

    def test_fix_respects_exclude(self, tmp_path: Path) -> None:
        kept = _write(tmp_path / "src" / "main.rs", "fn main() { }")
        excluded = _write(tmp_path / "generated" / "out.rs", "fn main() { }")
        vendored = _write(tmp_path / "vendored" / "lib.rs", "fn main() { }")
        result = runner.invoke(app, ["fix", "--path", str(tmp_path), "--exclude", "generated,vendored"])
        assert result.exit_code == 0
        assert kept.read_text(encoding="utf-8") == _FIXED_MAIN
        assert excluded.read_text(encoding="utf-8") == "fn main() { }"
        assert vendored.read_text(encoding="utf-8") == "fn main() { }"

    def test_strip_round_trip(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "lib.rs", "fn main() { }")
        assert runner.invoke(app, ["fix", "--path", str(tmp_path)]).exit_code == 0
        assert runner.invoke(app, ["check", "--path", str(tmp_path)]).exit_code == 0
        assert runner.invoke(app, ["strip", "--path", str(tmp_path)]).exit_code == 0
        assert path.read_text(encoding="utf-8") == "fn main() { }"

    def test_byte_order_mark_and_crlf_round_trip(self, tmp_path: Path) -> None:
        original = b"\xef\xbb\xbfimpl Unit { fn one() {} }\r\nfn two() {}\r\n"
        path = tmp_path / "lib.rs"
        path.write_bytes(original)
        assert runner.invoke(app, ["fix", "--path", str(tmp_path)]).exit_code == 0
        assert path.read_bytes() == (
            b'\xef\xbb\xbfimpl Unit { #[tracing::instrument(level = "trace", skip())] fn one() {} }\r\n'
            b'#[tracing::instrument(level = "trace", skip())]\r\nfn two() {}\r\n'
        )
        assert runner.invoke(app, ["check", "--path", str(tmp_path)]).exit_code == 0
        assert runner.invoke(app, ["strip", "--path", str(tmp_path)]).exit_code == 0
        assert path.read_bytes() == original

    def test_unchanged_files_are_not_rewritten(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "lib.rs", "#[test]\nfn t() {}\n")
        before = path.stat().st_mtime_ns
        result = runner.invoke(app, ["fix", "--path", str(tmp_path)])
        assert result.exit_code == 0
        assert path.stat().st_mtime_ns == before

    def test_parse_failure_continues_and_fails_run(self, tmp_path: Path) -> None:
        broken = _write(tmp_path / "a.rs", "fn main( {")
        good = _write(tmp_path / "b.rs", "fn main() { }")
        result = runner.invoke(app, ["fix", "--path", str(tmp_path)])
        assert result.exit_code == 1
        assert f"Failed to process {broken}" in result.output
        assert good.read_text(encoding="utf-8") == _FIXED_MAIN

    def test_missing_path(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["check", "--path", str(tmp_path / "nope")])
        assert result.exit_code == 1
        assert "Error:" in result.output
