"""
Flask extension wiring the Dropbox strategy into an application.
"""

import logging
from typing import Optional

from flask import Flask

from .blueprint import EXTENSION_NAME, dropbox_bp
from .config import PluginConfig
from .strategy import DropboxStrategy, VerifyCallback

logger = logging.getLogger(__name__)


def _default_verify(access_token, refresh_token, profile):
    return profile.to_dict()


class DropboxOAuth2Plugin:
    """
    Dropbox OAuth2 plugin for Flask applications.

    Builds a DropboxStrategy from the plugin configuration, exposes it on
    ``app.extensions["dropbox-oauth2"]`` and registers the authentication
    blueprint.
    """

    def __init__(
        self,
        app: Flask = None,
        verify: Optional[VerifyCallback] = None,
        config: Optional[PluginConfig] = None,
        strategy: Optional[DropboxStrategy] = None,
    ):
        """
        Initialize the plugin.

        Args:
            app: Flask application instance (optional, can call init_app later)
            verify: Callback turning (access_token, refresh_token, profile)
                into an application user; defaults to the profile as a dict
            config: Plugin configuration (read from the environment if omitted)
            strategy: Pre-built strategy (built from config if omitted)
        """
        self.app = app
        self.verify = verify or _default_verify
        self.config: PluginConfig = config
        self.strategy: DropboxStrategy = strategy

        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask, *args, **kwargs):
        """
        Initialize the plugin with a Flask application.

        Raises:
            ConfigurationError: DROPBOX_API_VERSION is not "1" or "2"
        """
        self.app = app

        if self.config is None:
            self.config = PluginConfig.from_env()
        if self.strategy is None:
            self.strategy = DropboxStrategy(self.config.dropbox, self.verify)

        if not app.config.get("SECRET_KEY"):
            logger.warning(
                "Flask SECRET_KEY not set. Sessions will not persist across restarts."
            )

        # Flask ships these keys with None/False defaults, so only unset
        # values are filled in; explicit application settings win.
        for key, value in self.get_config().items():
            if app.config.get(key) is None:
                app.config[key] = value

        app.extensions[EXTENSION_NAME] = {
            "strategy": self.strategy,
            "config": self.config,
        }
        app.register_blueprint(self.get_blueprint())

        strategy_config = self.strategy.config
        logger.info("Dropbox OAuth2 plugin initialized")
        logger.info(f"Dropbox API version: {strategy_config.api_version.value}")
        logger.info(f"Authorization URL: {strategy_config.authorization_url}")
        if not strategy_config.client_id:
            logger.warning("Dropbox OAuth2 not fully configured - DROPBOX_CLIENT_ID not set")

    def get_blueprint(self):
        """Return the Flask blueprint for this extension."""
        return dropbox_bp

    def get_config(self):
        """
        Return plugin configuration dictionary.

        Session cookie settings required for the OAuth2 redirect flow.
        """
        return {
            # SAMESITE must be "Lax" for OAuth2 redirects to work
            "SESSION_COOKIE_SECURE": False,
            "SESSION_COOKIE_HTTPONLY": True,
            "SESSION_COOKIE_SAMESITE": "Lax",
        }

    def get_config_secrets_to_obfuscate(self):
        """Return config keys that should not be exposed."""
        return ["DROPBOX_CLIENT_SECRET"]

    @staticmethod
    def get_name() -> str:
        """Return the plugin name."""
        return EXTENSION_NAME

    @staticmethod
    def get_version() -> str:
        """Return the plugin version."""
        from . import __version__
        return __version__
