"""
Flask blueprint for Dropbox OAuth2 authentication.

This blueprint provides the following endpoints:
- GET /auth/dropbox/login - Initiate the Dropbox authorization flow
- GET /auth/dropbox/callback - OAuth2 callback (receives authorization code)
- GET /auth/dropbox/logout - Clear session and logout
- GET /auth/dropbox/info - Describe the configured strategy
"""

import logging
import secrets
from typing import Optional
from urllib.parse import urlsplit

from flask import (
    current_app,
    jsonify,
    redirect,
    request,
    session,
    url_for,
)
from flask_smorest import Blueprint

from .config import PluginConfig
from .errors import AuthorizationError
from .strategy import DropboxStrategy

logger = logging.getLogger(__name__)

EXTENSION_NAME = DropboxStrategy.name

dropbox_bp = Blueprint(
    "dropbox_auth",
    __name__,
    url_prefix="/auth/dropbox",
    description="Dropbox OAuth2 authentication endpoints"
)


def get_strategy() -> DropboxStrategy:
    """Return the strategy registered on the current application."""
    return current_app.extensions[EXTENSION_NAME]["strategy"]


def get_config() -> PluginConfig:
    """Return the plugin configuration registered on the current application."""
    return current_app.extensions[EXTENSION_NAME]["config"]


def safe_return_url(url: Optional[str], default: str) -> str:
    """
    Return ``url`` if it is a same-origin relative path, else ``default``.

    Absolute URLs, scheme-relative URLs (``//host``) and backslash tricks
    are rejected so ``next`` cannot redirect off-site after login.
    """
    if not url or not url.startswith("/") or url.startswith("//") or "\\" in url:
        return default
    parts = urlsplit(url)
    if parts.scheme or parts.netloc:
        return default
    return url


@dropbox_bp.route("/login")
def login():
    """
    Initiate the Dropbox authorization flow.

    Query Parameters:
        next: URL to redirect to after successful login (optional)
    """
    try:
        config = get_config()
        strategy = get_strategy()

        # CSRF protection
        state = secrets.token_urlsafe(32)
        session["dropbox_oauth2_state"] = state
        session["auth_return_url"] = safe_return_url(
            request.args.get("next"), config.login_success_redirect
        )
        session.modified = True

        authorization_url = strategy.authorization_url(state)

        logger.info("Initiating Dropbox login, redirecting to provider")
        logger.debug(f"Authorization URL: {authorization_url}")
        return redirect(authorization_url)

    except Exception as e:
        logger.error(f"Error initiating Dropbox login: {e}")
        return jsonify({"error": "Failed to initiate authentication"}), 500


@dropbox_bp.route("/callback")
def callback():
    """
    OAuth2 callback endpoint.

    Receives the authorization code from Dropbox, lets the strategy exchange
    it and verify the user, and stores the Dropbox account id in the session.
    """
    config = get_config()

    try:
        state = request.args.get("state")
        stored_state = session.pop("dropbox_oauth2_state", None)

        if not state or state != stored_state:
            logger.warning("Dropbox OAuth2 state mismatch")
            return redirect(config.login_error_redirect)

        error = request.args.get("error")
        if error:
            raise AuthorizationError(
                error,
                request.args.get("error_description"),
                request.args.get("error_uri"),
            )

        code = request.args.get("code")
        if not code:
            logger.error("No authorization code received")
            return redirect(config.login_error_redirect)

        user, profile = get_strategy().authenticate(code, authorization_response=request.url)
        if not user:
            logger.warning("Dropbox user rejected by verify callback")
            return redirect(config.login_error_redirect)

        # Only the Dropbox identity is stored; the verified user need not
        # be JSON-serializable.
        session["dropbox_account_id"] = profile.id
        session["display_name"] = profile.display_name
        session["provider"] = EXTENSION_NAME

        return_url = safe_return_url(
            session.pop("auth_return_url", None), config.login_success_redirect
        )
        logger.info("User authenticated successfully via Dropbox")
        return redirect(return_url)

    except AuthorizationError as e:
        logger.error(f"Dropbox authorization error: {e.code} - {e.description}")
        return redirect(config.login_error_redirect)

    except Exception as e:
        logger.exception(f"Error processing Dropbox callback: {e}")
        return redirect(config.login_error_redirect)


@dropbox_bp.route("/logout")
def logout():
    """Logout and clear session."""
    config = get_config()

    session.clear()

    logger.info("User logged out")
    return redirect(config.frontend_url)


@dropbox_bp.route("/info")
def auth_info():
    """
    Return information about the configured strategy.

    This endpoint can be used by the frontend to display login options.
    """
    strategy = get_strategy()

    return jsonify({
        "strategy": strategy.name,
        "api_version": strategy.api_version.value,
        "login_url": url_for("dropbox_auth.login", _external=True),
        "configured": bool(strategy.config.client_id and strategy.config.client_secret),
    })
