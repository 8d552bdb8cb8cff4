"""
Tests for the command-line interface.
"""

from unittest.mock import patch

from git_traffic_charts import cli
from git_traffic_charts.config import Settings
from git_traffic_charts.context import create_app_context

from conftest import FakeFetcher


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_server_without_configuration_fails(monkeypatch):
    for key in ("HOST", "PORT", "REDIS_ADDR", "REDIS_PASSWORD", "GITHUB_CLIENT_ID", "GITHUB_CLIENT_SECRET"):
        monkeypatch.delenv(key, raising=False)

    assert cli.main(["server"]) == 1


def test_chart_rejects_bad_repo(capsys):
    assert cli.main(["chart", "not-a-repo", "-o", "out.png"]) == 2
    assert "owner/name" in capsys.readouterr().err


def test_chart_writes_png(tmp_path, store):
    settings = Settings(host="https://charts.example", port=0, github_client_id="id",
                        github_client_secret="secret", session_secret="s")
    context = create_app_context(settings, store=store, fetcher=FakeFetcher())
    context.tokens.put("bob", "tok")
    output = tmp_path / "chart.png"

    with patch.object(cli, "load_configuration", return_value=settings), \
            patch("git_traffic_charts.context.create_app_context", return_value=context):
        assert cli.main(["chart", "alice/repo", "-o", str(output), "--user", "bob"]) == 0

    assert output.read_bytes().startswith(b"\x89PNG")


def test_chart_without_token_fails(tmp_path, store, capsys):
    settings = Settings(host="https://charts.example", port=0, github_client_id="id",
                        github_client_secret="secret", session_secret="s")
    context = create_app_context(settings, store=store, fetcher=FakeFetcher())

    with patch.object(cli, "load_configuration", return_value=settings), \
            patch("git_traffic_charts.context.create_app_context", return_value=context):
        assert cli.main(["chart", "alice/repo", "-o", str(tmp_path / "chart.png")]) == 1

    assert "alice" in capsys.readouterr().err
