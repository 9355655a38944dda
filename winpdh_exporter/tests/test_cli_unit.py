"""Unit tests for the exporter CLI."""

from __future__ import annotations

import json

import pytest

from winpdh_exporter.service import cli
from winpdh_exporter.service.cli import cli_actions
from winpdh_exporter.service.cli.cli_parser import build_parser


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("WINPDH_CONFIG_FILE", "WINPDH_LISTEN_HOST", "WINPDH_LISTEN_PORT", "WINPDH_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


def test_derive_prints_name_and_labels(capsys) -> None:
    rc = cli.main(["derive", r"\\HOST1\Processor(_Total)\% Processor Time"])
    assert rc == 0
    data = json.loads(capsys.readouterr().out)
    assert data == {
        "name": "winpdh_percent_Processor_Time",
        "labels": {"hostname": "HOST1", "category": "Processor", "instance": "_Total"},
    }


def test_derive_with_instance(capsys) -> None:
    assert cli.main(["derive", r"\LogicalDisk(*)\Free Megabytes", "--instance", "C:"]) == 0
    assert json.loads(capsys.readouterr().out)["labels"]["instance"] == "C:"


def test_derive_bad_path_exits_2(capsys) -> None:
    assert cli.main(["derive", r"\a\b\c"]) == 2
    err = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert err["error"] == "derivation"


def test_validate_text_and_json(tmp_path, capsys) -> None:
    path = tmp_path / "exporter.yaml"
    path.write_text(
        "counter_sets:\n  - host: srv\n    interval: 5\n    counters: ['\\Memory\\Available MBytes']\n",
        encoding="utf-8",
    )
    assert cli.main(["validate", "--config", str(path)]) == 0
    out = capsys.readouterr().out
    assert "srv every 5s (1 counters)" in out
    assert r"\\srv\Memory\Available MBytes" in out

    assert cli.main(["validate", "--config", str(path), "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["counter_sets"][0]["host"] == "srv"


def test_validate_bad_config_exits_2(tmp_path, capsys) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("counter_sets:\n  - interval: -1\n", encoding="utf-8")
    assert cli.main(["validate", "--config", str(path)]) == 2
    assert '"config"' in capsys.readouterr().err


def test_run_is_default_command_and_passes_overrides(monkeypatch, tmp_path) -> None:
    seen = {}

    def fake_serve(config, *, mock, config_path):
        seen.update(port=config.listen_port, host=config.listen_host, mock=mock, path=config_path)

    monkeypatch.setattr("winpdh_exporter.service.server.serve", fake_serve)
    path = tmp_path / "exporter.yaml"
    path.write_text("listen_port: 1234\n", encoding="utf-8")

    assert cli.main(["--config", str(path), "--mock", "--port", "5555"]) == 0
    assert seen == {"port": 5555, "host": "0.0.0.0", "mock": True, "path": str(path)}


def test_parser_declares_subcommands() -> None:
    p = build_parser()
    args = p.parse_args(["derive", r"\Memory\Available MBytes"])
    assert args.cmd == "derive" and args.instance == ""
    assert cli_actions.EXIT_ERROR == 2
