from __future__ import annotations

import json

import httpx
import pytest
from typer.testing import CliRunner

from timetagger_client import main
from timetagger_client.client import TimeTaggerClient

from tests.conftest import API_KEY, BASE_URL, FakeTimeTagger

T0 = 1_700_000_000

runner = CliRunner()


@pytest.fixture
def cli_server(monkeypatch: pytest.MonkeyPatch, fake_server: FakeTimeTagger) -> FakeTimeTagger:
    monkeypatch.setattr(
        main,
        "_build_client",
        lambda: TimeTaggerClient(BASE_URL, API_KEY, transport=httpx.MockTransport(fake_server.handle)),
    )
    fake_server.add_record("work", T0, T0 + 3600, "deep work #code")
    fake_server.add_record("gone", T0, T0 + 60, "HIDDEN scrapped")
    fake_server.add_setting("theme", "dark")
    return fake_server


def test_info_masks_api_key(isolated_settings, monkeypatch):
    monkeypatch.setenv("TIMETAGGER_URL", "https://tt.example/api/v2/")
    monkeypatch.setenv("TIMETAGGER_API_KEY", "supersecret9876")

    result = runner.invoke(main.app, ["info"])

    assert result.exit_code == 0
    assert "https://tt.example/api/v2/" in result.stdout
    assert "9876" in result.stdout
    assert "supersecret" not in result.stdout


def test_records_json_hides_deleted_by_default(cli_server):
    result = runner.invoke(main.app, ["records", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert [r["key"] for r in payload] == ["work"]
    assert payload[0]["duration_seconds"] == 3600
    assert payload[0]["tags"] == ["#code"]
    assert payload[0]["running"] is False


def test_records_json_include_hidden(cli_server):
    result = runner.invoke(main.app, ["records", "--json", "--include-hidden"])

    assert result.exit_code == 0
    assert sorted(r["key"] for r in json.loads(result.stdout)) == ["gone", "work"]


def test_records_range_options_are_forwarded(cli_server):
    result = runner.invoke(main.app, ["records", "--json", "--start", "2030-01-01", "--end", "2030-01-02"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == []
    start, end = cli_server.requests[-1].url.params["timerange"].split("-")
    assert int(end) - int(start) == 86400


def test_records_table(cli_server):
    result = runner.invoke(main.app, ["records"])

    assert result.exit_code == 0
    assert "TimeTagger Records" in result.stdout
    assert "1:00:00" in result.stdout


def test_settings_json(cli_server):
    result = runner.invoke(main.app, ["settings", "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)[0]["value"] == "dark"


def test_settings_table(cli_server):
    result = runner.invoke(main.app, ["settings"])

    assert result.exit_code == 0
    assert "theme" in result.stdout


def test_updates_json(cli_server):
    result = runner.invoke(main.app, ["updates", "--since", "2020-01-01", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["server_time"].startswith("2023-11-14T22:13:20.250")
    assert {r["key"] for r in payload["records"]} == {"work", "gone"}
    assert [s["key"] for s in payload["settings"]] == ["theme"]


def test_delete_marks_records_hidden(cli_server):
    result = runner.invoke(main.app, ["delete", "work", "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"accepted": ["work"], "rejected": [], "errors": []}
    assert cli_server.records["work"]["ds"] == "HIDDEN deep work #code"


def test_delete_unknown_key_fails_without_writing(cli_server):
    result = runner.invoke(main.app, ["delete", "work", "nope"])

    assert result.exit_code == 1
    assert "nope" in result.output
    assert all(r.method == "GET" for r in cli_server.requests)


def test_delete_rejected_exits_non_zero(cli_server):
    cli_server.reject_keys = {"work"}

    result = runner.invoke(main.app, ["delete", "work"])

    assert result.exit_code == 1
    assert "Rejected" in result.stdout


def test_transport_error_is_reported(monkeypatch):
    monkeypatch.setattr(
        main,
        "_build_client",
        lambda: TimeTaggerClient(
            BASE_URL, API_KEY, transport=httpx.MockTransport(lambda r: httpx.Response(502, text="bad gateway"))
        ),
    )

    result = runner.invoke(main.app, ["settings"])

    assert result.exit_code == 1
    assert "bad gateway" in result.output
