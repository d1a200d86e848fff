"""
dropbox-oauth2

Dropbox authentication strategy using the OAuth 2.0 authorization-code flow.

Supported Dropbox API versions:
- 1 (``/1/account/info``), the default
- 2 (``/2/users/get_current_account``)

This package provides:
- Per-version endpoint configuration
- Normalized user profiles from Dropbox account info
- A Flask extension and blueprint for the login/callback flow
"""

__version__ = "0.1.0"

from .config import ApiVersion, DropboxStrategyConfig, PluginConfig
from .errors import AuthorizationError, ConfigurationError, InternalOAuthError
from .profile import NormalizedProfile, ProfileEmail, ProfileName, parse_profile
from .strategy import DropboxStrategy
from .plugin import DropboxOAuth2Plugin
from .blueprint import dropbox_bp

__all__ = [
    "ApiVersion",
    "AuthorizationError",
    "ConfigurationError",
    "DropboxOAuth2Plugin",
    "DropboxStrategy",
    "DropboxStrategyConfig",
    "InternalOAuthError",
    "NormalizedProfile",
    "PluginConfig",
    "ProfileEmail",
    "ProfileName",
    "dropbox_bp",
    "parse_profile",
    "__version__",
]
