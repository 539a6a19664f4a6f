# tests/5_core/test_load_manifest.py

from pathlib import Path

import pytest

import bundlesmith.manifest as mod_manifest
from tests.utils import write_manifest


def test_load_manifest_reads_fields(tmp_path: Path) -> None:
    """A valid manifest is returned as-is."""
    # --- setup ---
    write_manifest(tmp_path, name="acme", main="dist/acme.js")

    # --- execute ---
    manifest = mod_manifest.load_manifest(tmp_path)

    # --- verify ---
    assert manifest["name"] == "acme"
    assert manifest["main"] == "dist/acme.js"


def test_load_manifest_missing_file_warns_and_synthesizes_name(
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
) -> None:
    """No manifest is not fatal: warn and name the project after its directory."""
    # --- setup ---
    project = tmp_path / "widget"
    project.mkdir()

    # --- execute ---
    manifest = mod_manifest.load_manifest(project)

    # --- verify ---
    assert manifest == {"name": "widget"}
    err = capsys.readouterr().err
    assert "no package.json found." in err
    assert 'missing package.json "name" field' in err


def test_load_manifest_invalid_json_warns_with_reason(
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
) -> None:
    # --- setup ---
    (tmp_path / "package.json").write_text("{ not json", encoding="utf-8")

    # --- execute ---
    manifest = mod_manifest.load_manifest(tmp_path)

    # --- verify ---
    assert manifest["name"] == tmp_path.name
    err = capsys.readouterr().err
    assert "no package.json found." in err
    assert "Invalid JSON" in err


def test_read_manifest_rejects_non_object(tmp_path: Path) -> None:
    # --- setup ---
    (tmp_path / "package.json").write_text("[1, 2]", encoding="utf-8")

    # --- execute and verify ---
    with pytest.raises(ValueError, match="root type"):
        mod_manifest.read_manifest(tmp_path)


def test_dependency_name_helpers() -> None:
    # --- setup ---
    manifest = {
        "name": "acme",
        "dependencies": {"lodash": "^4", "tslib": "^2"},
        "peerDependencies": {"preact": "*"},
    }

    # --- execute and verify ---
    assert mod_manifest.dependency_names(manifest) == ["lodash", "tslib"]  # type: ignore[arg-type]
    assert mod_manifest.peer_dependency_names(manifest) == ["preact"]  # type: ignore[arg-type]
    assert mod_manifest.dependency_names({}) == []
