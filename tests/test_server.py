"""
End-to-end tests of the HTTP routes against a live server on an ephemeral port.
"""

import threading
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from git_traffic_charts.auth import GitHubOAuth
from git_traffic_charts.config import Settings
from git_traffic_charts.context import create_app_context
from git_traffic_charts.errors import OAuthError, UpstreamFetchError
from git_traffic_charts.server import PROJECT_URL, create_server, is_path_segment

from conftest import FakeFetcher

SETTINGS = Settings(
    host="https://charts.example",
    port=0,
    github_client_id="client-id",
    github_client_secret="client-secret",
    redis_addr="localhost:6379",
    redis_password="",
    session_secret="test secret",
)


@pytest.fixture
def oauth():
    oauth = GitHubOAuth("client-id", "client-secret", session=MagicMock())
    oauth.exchange_code_for_token = MagicMock(return_value="fresh-token")
    oauth.get_user_login = MagicMock(return_value="alice")
    return oauth


@pytest.fixture
def app(store, fetcher, oauth):
    context = create_app_context(SETTINGS, store=store, fetcher=fetcher, oauth=oauth)
    httpd = create_server(context, host="127.0.0.1", port=0)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    base_url = f"http://127.0.0.1:{httpd.server_address[1]}"
    yield context, base_url
    httpd.shutdown()
    httpd.server_close()


def test_index_redirects_to_project(app):
    _, base_url = app

    response = requests.get(base_url + "/", allow_redirects=False)

    assert response.status_code == 302
    assert response.headers["Location"] == PROJECT_URL


def test_authorize_redirects_to_github_with_state(app):
    context, base_url = app

    response = requests.get(base_url + "/_authorize", allow_redirects=False)

    assert response.status_code == 302
    location = urlparse(response.headers["Location"])
    params = parse_qs(location.query)
    assert location.netloc == "github.com"
    assert params["redirect_uri"] == ["https://charts.example/_callback"]
    assert params["scope"] == ["public_repo"]
    context.states.validate_state(params["state"][0])


def test_callback_stores_token(app):
    context, base_url = app
    state = context.states.create_state()

    response = requests.get(base_url + "/_callback", params={"code": "abc", "state": state})

    assert response.status_code == 200
    assert response.text == "done."
    assert context.tokens.get("alice") == "fresh-token"


def test_callback_rejects_bad_state(app):
    context, base_url = app

    response = requests.get(base_url + "/_callback", params={"code": "abc", "state": "forged"})

    assert response.status_code == 400
    context.oauth.exchange_code_for_token.assert_not_called()


def test_callback_oauth_failure_is_generic_error(app):
    context, base_url = app
    context.oauth.exchange_code_for_token.side_effect = OAuthError("failed to fetch access token")

    response = requests.get(base_url + "/_callback",
                            params={"code": "abc", "state": context.states.create_state()})

    assert response.status_code == 500
    assert "access token" not in response.text


def test_chart_without_token_is_404(app):
    _, base_url = app

    response = requests.get(base_url + "/alice/repo")

    assert response.status_code == 404
    assert "token" in response.text


def test_chart_after_registering_token(app, fetcher):
    context, base_url = app
    context.tokens.put("alice", "tok")

    response = requests.get(base_url + "/alice/repo")

    assert response.status_code == 200
    assert response.headers["Content-Type"] == "image/png"
    assert response.headers["Cache-Control"] == "no-cache"
    assert response.headers["Expires"].endswith(" GMT")
    assert response.content.startswith(b"\x89PNG")
    assert fetcher.calls == [("alice/repo", "tok")]


def test_chart_user_query_overrides_token_owner(app, fetcher):
    context, base_url = app
    context.tokens.put("bob", "bobs-token")

    response = requests.get(base_url + "/alice/repo", params={"user": "bob"})

    assert response.status_code == 200
    assert fetcher.calls == [("alice/repo", "bobs-token")]


def test_chart_fetch_failure_is_500(store, oauth):
    fetcher = FakeFetcher(error=UpstreamFetchError("GitHub is down"))
    context = create_app_context(SETTINGS, store=store, fetcher=fetcher, oauth=oauth)
    context.tokens.put("alice", "tok")
    httpd = create_server(context, host="127.0.0.1", port=0)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        response = requests.get(f"http://127.0.0.1:{httpd.server_address[1]}/alice/repo")
    finally:
        httpd.shutdown()
        httpd.server_close()

    assert response.status_code == 500


def test_encoded_slash_in_repo_is_404(app, fetcher):
    context, base_url = app
    context.tokens.put("alice", "tok")

    response = requests.get(base_url + "/alice/a%2F..%2F..%2Fusers")

    assert response.status_code == 404
    assert fetcher.calls == []


@pytest.mark.parametrize("name, allowed", [
    ("repo", True),
    ("my.repo", True),
    ("", False),
    (".", False),
    ("..", False),
    ("a/b", False),
])
def test_is_path_segment(name, allowed):
    assert is_path_segment(name) is allowed


def test_unknown_path_is_404(app):
    _, base_url = app

    assert requests.get(base_url + "/favicon.ico").status_code == 404
