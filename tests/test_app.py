from __future__ import annotations

import json
from pathlib import Path

import pytest

import app
import settings


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"enabled_teams": ""}), encoding="utf-8")
    monkeypatch.setattr(settings, "CONFIG_PATH", str(config_path))
    monkeypatch.setattr(settings, "DB_PATH", str(tmp_path / "bridge.db"))
    monkeypatch.setattr(settings, "LOGGING", {})
    return config_path


def test_links_command_lists_stored_link(cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    app.main(["link", "c1", "teamA", "rt1", "r-c1"])
    app.main(["links"])

    out = capsys.readouterr().out
    assert "Linked c1 -> rt1/r-c1" in out
    table = out.split("Linked c1 -> rt1/r-c1", 1)[1]
    assert "Channel links" in table
    assert "teamA" in table


def test_invalid_config_exits_with_error_message(cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    app.main(["link", "c1", "teamA", "rt1", "r-c1"])
    capsys.readouterr()

    # The enabled-team list is re-read per lookup, so a broken edit shows up here.
    cli_env.write_text("{not json", encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        app.main(["links"])

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert err.startswith("error: Invalid config file")


def test_missing_link_exits_with_error_message(cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        app.main(["show", "nope"])

    assert excinfo.value.code == 1
    assert "error: no link for channel nope" in capsys.readouterr().err
