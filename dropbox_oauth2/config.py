"""
Configuration management for the Dropbox OAuth2 strategy.

This module holds the per-API-version endpoint table and resolves the
options a strategy is constructed with into an immutable configuration.
"""

import os
import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple, Union

from .errors import ConfigurationError


class ApiVersion(str, Enum):
    """Dropbox API versions the strategy knows how to talk to."""

    V1 = "1"
    V2 = "2"

    @classmethod
    def parse(cls, value) -> "ApiVersion":
        """
        Coerce a user supplied version into an ApiVersion.

        ``None`` selects the default (v1). Anything that does not compare
        equal to "1" or "2" after ``str()`` is rejected.
        """
        if value is None:
            return cls.V1
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            raise ConfigurationError(
                'Unsupported Dropbox API version. Supported versions are "1" and "2".'
            ) from None


@dataclass(frozen=True)
class ApiVersionDefaults:
    """Endpoints and request conventions for one Dropbox API version."""

    authorization_url: str
    token_url: str
    profile_url: str
    profile_method: str
    scope_separator: str = ","
    custom_headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))


DEFAULTS_BY_API_VERSION = MappingProxyType({
    ApiVersion.V1: ApiVersionDefaults(
        authorization_url="https://www.dropbox.com/1/oauth2/authorize",
        token_url="https://api.dropbox.com/1/oauth2/token",
        profile_url="https://api.dropbox.com/1/account/info",
        profile_method="GET",
        scope_separator=",",
        custom_headers=MappingProxyType({}),
    ),
    ApiVersion.V2: ApiVersionDefaults(
        authorization_url="https://www.dropbox.com/oauth2/authorize",
        token_url="https://api.dropbox.com/oauth2/token",
        profile_url="https://api.dropboxapi.com/2/users/get_current_account",
        profile_method="POST",
        scope_separator=",",
        custom_headers=MappingProxyType({"Content-Type": "application/json"}),
    ),
})


def _split_scope(scope: Union[str, Iterable[str], None], separator: str) -> Tuple[str, ...]:
    if not scope:
        return ()
    if isinstance(scope, str):
        parts = re.split(rf"[{re.escape(separator)}\s]+", scope)
    else:
        parts = list(scope)
    return tuple(part.strip() for part in parts if part and part.strip())


@dataclass(frozen=True)
class DropboxStrategyConfig:
    """Fully resolved, immutable configuration of a Dropbox strategy."""

    api_version: ApiVersion = ApiVersion.V1

    # OAuth2 endpoints
    authorization_url: str = ""
    token_url: str = ""

    scope_separator: str = ","
    custom_headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    # Client credentials
    client_id: str = ""
    client_secret: str = ""

    # Where Dropbox redirects the user after authorization
    callback_url: str = ""

    scope: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "api_version", ApiVersion.parse(self.api_version))
        object.__setattr__(self, "custom_headers", MappingProxyType(dict(self.custom_headers)))
        object.__setattr__(self, "scope", _split_scope(self.scope, self.scope_separator))

    @property
    def defaults(self) -> ApiVersionDefaults:
        """The default endpoint row for the configured API version."""
        return DEFAULTS_BY_API_VERSION[self.api_version]

    @property
    def profile_url(self) -> str:
        return self.defaults.profile_url

    @classmethod
    def resolve(
        cls,
        api_version=None,
        authorization_url: Optional[str] = None,
        token_url: Optional[str] = None,
        scope_separator: Optional[str] = None,
        custom_headers: Optional[Mapping[str, str]] = None,
        client_id: str = "",
        client_secret: str = "",
        callback_url: str = "",
        scope: Union[str, Iterable[str], None] = None,
    ) -> "DropboxStrategyConfig":
        """
        Resolve strategy options against the per-version default table.

        The API version is validated before anything else. Unset endpoint
        URLs, scope separator and headers are taken from the default row of
        that version; explicit values override them. An explicit empty
        ``custom_headers`` mapping is kept and sends no extra headers.

        Raises:
            ConfigurationError: if ``api_version`` is not "1" or "2"
        """
        version = ApiVersion.parse(api_version)
        defaults = DEFAULTS_BY_API_VERSION[version]

        return cls(
            api_version=version,
            authorization_url=authorization_url or defaults.authorization_url,
            token_url=token_url or defaults.token_url,
            scope_separator=scope_separator or defaults.scope_separator,
            custom_headers=custom_headers if custom_headers is not None else defaults.custom_headers,
            client_id=client_id or "",
            client_secret=client_secret or "",
            callback_url=callback_url or "",
            scope=scope or (),
        )

    @classmethod
    def from_env(cls) -> "DropboxStrategyConfig":
        """Create configuration from environment variables."""
        base_url = os.environ.get("DROPBOX_BASE_URL", "http://localhost:5000")

        return cls.resolve(
            api_version=os.environ.get("DROPBOX_API_VERSION") or None,
            authorization_url=os.environ.get("DROPBOX_AUTHORIZATION_URL"),
            token_url=os.environ.get("DROPBOX_TOKEN_URL"),
            scope_separator=os.environ.get("DROPBOX_SCOPE_SEPARATOR"),
            client_id=os.environ.get("DROPBOX_CLIENT_ID", ""),
            client_secret=os.environ.get("DROPBOX_CLIENT_SECRET", ""),
            callback_url=os.environ.get(
                "DROPBOX_CALLBACK_URL",
                f"{base_url}/auth/dropbox/callback"
            ),
            scope=os.environ.get("DROPBOX_SCOPE", ""),
        )


@dataclass
class PluginConfig:
    """Overall plugin configuration."""

    dropbox: DropboxStrategyConfig = field(default_factory=DropboxStrategyConfig.from_env)

    # Frontend redirect settings
    frontend_url: str = "/"
    login_success_redirect: str = "/"
    login_error_redirect: str = "/login?error=auth_failed"

    @classmethod
    def from_env(cls) -> "PluginConfig":
        """Create configuration from environment variables."""
        return cls(
            dropbox=DropboxStrategyConfig.from_env(),
            frontend_url=os.environ.get("DROPBOX_FRONTEND_URL", "/"),
            login_success_redirect=os.environ.get(
                "DROPBOX_LOGIN_SUCCESS_REDIRECT", "/"
            ),
            login_error_redirect=os.environ.get(
                "DROPBOX_LOGIN_ERROR_REDIRECT", "/login?error=auth_failed"
            ),
        )
