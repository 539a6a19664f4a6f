# tests/9_integration/test_cli_main.py
"""End-to-end runs of the CLI with a stand-in engine command."""

import shlex
from pathlib import Path

import apathetic_logging as mod_alogs
import pytest

import bundlesmith.cli as mod_cli
import bundlesmith.logs as mod_logs
import bundlesmith.meta as mod_meta
from tests.utils import write_engine_script, write_manifest, write_source


@pytest.fixture
def acme(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    write_manifest(
        tmp_path, name="acme", main="dist/acme.js", module="dist/acme.module.js"
    )
    write_source(tmp_path, "src/index.js", "export default foo;\nexport const bar = 1;\n")
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _engine(root: Path) -> str:
    return shlex.join(write_engine_script(root / "tools"))


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    """Should print the program name with version and commit."""
    # --- execute ---
    code = mod_cli.main(["--version"])

    # --- verify ---
    assert code == 0
    assert mod_meta.PROGRAM_DISPLAY in capsys.readouterr().out


def test_build_writes_every_format(
    capsys: pytest.CaptureFixture[str],
    acme: Path,
) -> None:
    # --- execute ---
    code = mod_cli.main(["--engine", _engine(acme), "-f", "es,cjs,umd"])

    # --- verify ---
    assert code == 0
    dist = acme / "dist"
    assert (dist / "acme.js").read_text().startswith("// cjs")
    assert (dist / "acme.module.js").read_text().startswith("// es")
    assert (dist / "acme.umd.js").read_text().startswith("// umd")
    out = capsys.readouterr().out
    assert "Build output to dist:" in out
    assert ": acme.umd.js" in out


def test_leading_build_word_is_accepted(acme: Path) -> None:
    # --- execute ---
    code = mod_cli.main(["build", "src/index.js", "--engine", _engine(acme), "-f", "cjs"])

    # --- verify ---
    assert code == 0
    assert (acme / "dist" / "acme.js").is_file()
    assert not (acme / "dist" / "acme.module.js").exists()


def test_config_file_supplies_defaults(
    capsys: pytest.CaptureFixture[str],
    acme: Path,
) -> None:
    # --- setup ---
    (acme / ".bundlesmith.jsonc").write_text(
        '{\n  // only the browser bundle\n  "format": "umd",\n}\n'
    )

    # --- execute ---
    code = mod_cli.main(["--engine", _engine(acme)])

    # --- verify ---
    assert code == 0
    assert (acme / "dist" / "acme.umd.js").is_file()
    assert not (acme / "dist" / "acme.js").exists()
    assert "Using config: .bundlesmith.jsonc" in capsys.readouterr().out


def test_cwd_flag_points_at_project(
    monkeypatch: pytest.MonkeyPatch,
    acme: Path,
) -> None:
    # --- setup ---
    monkeypatch.chdir(acme.parent)

    # --- execute ---
    code = mod_cli.main(["--cwd", acme.name, "--engine", _engine(acme), "-f", "cjs"])

    # --- verify ---
    assert code == 0
    assert (acme / "dist" / "acme.js").is_file()


def test_missing_manifest_and_entry_is_fatal(
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    # --- setup ---
    monkeypatch.chdir(tmp_path)

    # --- execute ---
    code = mod_cli.main(["--engine", _engine(tmp_path / "elsewhere")])

    # --- verify ---
    assert code == 1
    err = capsys.readouterr().err
    assert err.index("no package.json found.") < err.index("No entry module found")
    assert not (tmp_path / "dist").exists()


def test_unknown_format_is_reported(
    capsys: pytest.CaptureFixture[str],
    acme: Path,  # noqa: ARG001
) -> None:
    # --- execute ---
    code = mod_cli.main(["-f", "iife"])

    # --- verify ---
    assert code == 1
    assert "Unknown output format 'iife'" in capsys.readouterr().err


def test_missing_engine_is_reported(
    capsys: pytest.CaptureFixture[str],
    acme: Path,  # noqa: ARG001
) -> None:
    # --- execute ---
    code = mod_cli.main(["--engine", "no-such-engine-cmd-xyz"])

    # --- verify ---
    assert code == 1
    err = capsys.readouterr().err
    assert "Build failed for index.js (cjs)" in err
    assert "Bundling engine not found" in err


def test_engine_failure_is_reported(
    capsys: pytest.CaptureFixture[str],
    acme: Path,
) -> None:
    """The stub engine refuses to write fail.js."""
    # --- execute ---
    code = mod_cli.main(["--engine", _engine(acme), "-o", "dist/fail.js", "-f", "cjs"])

    # --- verify ---
    assert code == 1
    assert "engine refused fail.js" in capsys.readouterr().err


def test_typo_gets_a_hint(capsys: pytest.CaptureFixture[str]) -> None:
    # --- execute ---
    with pytest.raises(SystemExit) as exc_info:
        mod_cli.main(["--fromat", "es"])

    # --- verify ---
    assert exc_info.value.code == 2
    assert "did you mean --format" in capsys.readouterr().err


def test_watch_word_enables_watch_mode() -> None:
    # --- setup ---
    args = mod_cli._setup_parser().parse_args(["watch", "src/a.js"])  # noqa: SLF001

    # --- execute ---
    mod_cli._normalize_mode(args)  # noqa: SLF001

    # --- verify ---
    assert args.watch is True
    assert args.entries == ["src/a.js"]


def test_parser_flags() -> None:
    # --- execute ---
    args = mod_cli._setup_parser().parse_args(  # noqa: SLF001
        [
            "--no-compress",
            "--strict",
            "--define",
            "A=1",
            "--define",
            "B=2",
            "--jsx-fragment",
            "Frag",
            "-q",
        ]
    )

    # --- verify ---
    assert args.compress is False
    assert args.strict is True
    assert args.defines == ["A=1", "B=2"]
    assert args.jsx_fragment == "Frag"
    assert args.log_level == "warning"
    assert args.watch is False


def test_main_falls_back_to_safe_log(monkeypatch: pytest.MonkeyPatch) -> None:
    """If the logger itself fails while reporting, safeLog() gets the message."""
    # --- setup ---
    called: dict[str, str] = {}

    # --- stubs ---
    def fake_parser() -> object:
        xmsg = "simulated fail"
        raise ValueError(xmsg)

    def exploding_report(msg: str, *args: object, **kwargs: object) -> None:  # noqa: ARG001
        xmsg = "handler exploded"
        raise RuntimeError(xmsg)

    def fake_safe_log(msg: str) -> None:
        called["msg"] = msg

    # --- patch and execute ---
    monkeypatch.setattr(mod_cli, "_setup_parser", fake_parser)
    monkeypatch.setattr(mod_logs.get_logger(), "errorIfNotDebug", exploding_report)
    monkeypatch.setattr(mod_alogs, "safeLog", fake_safe_log)
    code = mod_cli.main([])

    # --- verify ---
    assert code == 1
    assert "simulated fail" in called["msg"]
