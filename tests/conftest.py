"""
Pytest fixtures for dropbox_oauth2 tests.

Provides:
- Sample Dropbox v1/v2 account-info payloads
- A recording fake OAuth2 engine
- A Flask application with the plugin installed
"""

import json

import pytest
from flask import Flask

from dropbox_oauth2.config import DropboxStrategyConfig, PluginConfig
from dropbox_oauth2.plugin import DropboxOAuth2Plugin
from dropbox_oauth2.strategy import DropboxStrategy


V1_PAYLOAD = {
    "uid": "42",
    "display_name": "A B",
    "name_details": {"surname": "B", "given_name": "A"},
    "email": "a@b.com",
}

V2_PAYLOAD = {
    "account_id": "acc1",
    "name": {"display_name": "A B", "surname": "B", "given_name": "A"},
    "email": "a@b.com",
}


class FakeEngine:
    """Stands in for OAuth2Engine and records every call."""

    def __init__(self, body=None, error=None, token=None):
        self.body = body
        self.error = error
        self.token = token if token is not None else {
            "access_token": "access-123",
            "refresh_token": "refresh-456",
            "token_type": "bearer",
        }
        self.calls = []

    def _respond(self):
        if self.error is not None:
            raise self.error
        return self.body

    def authorization_url(self, state, scope=None, **params):
        self.calls.append(("authorization_url", state, scope))
        return f"https://www.dropbox.com/oauth2/authorize?state={state}"

    def fetch_token(self, code, authorization_response=None):
        self.calls.append(("fetch_token", code, authorization_response))
        return self.token

    @staticmethod
    def build_auth_header(access_token):
        return f"Bearer {access_token}"

    def get(self, url, access_token):
        self.calls.append(("get", url, access_token))
        return self._respond()

    def request(self, method, url, headers=None, body=None, access_token=None):
        self.calls.append(("request", method, url, headers, body, access_token))
        return self._respond()


@pytest.fixture
def v1_body():
    return json.dumps(V1_PAYLOAD)


@pytest.fixture
def v2_body():
    return json.dumps(V2_PAYLOAD)


@pytest.fixture
def verify_calls():
    return []


@pytest.fixture
def verify(verify_calls):
    def _verify(access_token, refresh_token, profile):
        verify_calls.append((access_token, refresh_token, profile))
        return {"id": profile.id, "name": profile.display_name}
    return _verify


@pytest.fixture
def v2_engine(v2_body):
    return FakeEngine(body=v2_body)


@pytest.fixture
def app(v2_engine, verify):
    """Flask app with the plugin wired to a fake engine."""
    app = Flask(__name__)
    app.config["SECRET_KEY"] = "test-secret"
    app.config["TESTING"] = True

    strategy_config = DropboxStrategyConfig.resolve(
        api_version="2",
        client_id="app-key",
        client_secret="app-secret",
        callback_url="http://localhost/auth/dropbox/callback",
    )
    plugin_config = PluginConfig(
        dropbox=strategy_config,
        frontend_url="/home",
        login_success_redirect="/dashboard",
        login_error_redirect="/login?error=auth_failed",
    )
    strategy = DropboxStrategy(strategy_config, verify, engine=v2_engine)
    DropboxOAuth2Plugin(app, config=plugin_config, strategy=strategy)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
