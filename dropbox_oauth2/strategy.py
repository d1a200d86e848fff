"""
Dropbox authentication strategy.

The strategy authenticates users by delegating to Dropbox using the OAuth 2.0
authorization-code flow. Applications supply a ``verify`` callable which
receives the access token, the refresh token and the normalized profile and
returns the application user, or ``False`` if the credentials are not valid.

Example:

    strategy = DropboxStrategy(
        DropboxStrategyConfig.resolve(
            api_version="2",
            client_id="yourAppKey",
            client_secret="yourAppSecret",
            callback_url="https://www.example.net/auth/dropbox/callback",
        ),
        verify=lambda access_token, refresh_token, profile: find_or_create(profile),
    )
"""

import logging
from typing import Any, Callable, Optional, Sequence

from .config import ApiVersion, DropboxStrategyConfig
from .engine import OAuth2Engine
from .errors import InternalOAuthError
from .profile import NormalizedProfile, parse_profile

logger = logging.getLogger(__name__)

VerifyCallback = Callable[[str, Optional[str], NormalizedProfile], Any]


class DropboxStrategy:
    """OAuth2 strategy for Dropbox API v1 and v2."""

    name = "dropbox-oauth2"

    def __init__(
        self,
        config: DropboxStrategyConfig,
        verify: VerifyCallback,
        engine: Optional[OAuth2Engine] = None,
    ):
        """
        Initialize the strategy.

        Args:
            config: Resolved strategy configuration
            verify: Callback turning (access_token, refresh_token, profile)
                into an application user
            engine: OAuth2 engine to delegate to (built from config if omitted)
        """
        if not callable(verify):
            raise TypeError("DropboxStrategy requires a verify callback")

        self.config = config
        self._verify = verify
        self._engine = engine if engine is not None else OAuth2Engine(
            authorization_url=config.authorization_url,
            token_url=config.token_url,
            client_id=config.client_id,
            client_secret=config.client_secret,
            callback_url=config.callback_url,
            scope_separator=config.scope_separator,
            custom_headers=config.custom_headers,
        )

    @property
    def api_version(self) -> ApiVersion:
        return self.config.api_version

    def authorization_url(self, state: str, scope: Optional[Sequence[str]] = None) -> str:
        """Return the Dropbox authorization URL for a new login attempt."""
        return self._engine.authorization_url(state, scope=scope or self.config.scope)

    def _retrieve_user_profile(self, access_token: str) -> str:
        profile_url = self.config.profile_url

        if self.api_version is ApiVersion.V1:
            return self._engine.get(profile_url, access_token)

        # API v2 only accepts POST here, and rejects an empty body: the
        # literal JSON "null" has to be sent.
        return self._engine.request(
            "POST",
            profile_url,
            {"Authorization": self._engine.build_auth_header(access_token)},
            "null",
            access_token,
        )

    def user_profile(self, access_token: str) -> NormalizedProfile:
        """
        Retrieve the user profile from Dropbox.

        Raises:
            InternalOAuthError: the profile request failed
            json.JSONDecodeError: Dropbox returned a body that is not JSON
        """
        try:
            body = self._retrieve_user_profile(access_token)
        except Exception as e:
            raise InternalOAuthError("failed to fetch user profile", e) from e

        profile = parse_profile(body, self.api_version)
        logger.debug(f"Fetched Dropbox profile for account {profile.id}")
        return profile

    def authenticate(self, code: str, authorization_response: Optional[str] = None):
        """
        Complete the authorization-code flow and verify the user.

        Args:
            code: Authorization code received on the callback
            authorization_response: Full callback URL, if available

        Returns:
            Tuple of (user, profile): ``user`` is whatever the verify callback
            returns (``False``/``None`` when the user is rejected)
        """
        try:
            token = self._engine.fetch_token(code, authorization_response=authorization_response)
        except Exception as e:
            raise InternalOAuthError("failed to obtain access token", e) from e

        access_token = token.get("access_token")
        if not access_token:
            raise InternalOAuthError("failed to obtain access token")
        refresh_token = token.get("refresh_token")

        profile = self.user_profile(access_token)
        user = self._verify(access_token, refresh_token, profile)

        if user:
            logger.info(f"Dropbox account {profile.id} authenticated")
        else:
            logger.info(f"Dropbox account {profile.id} rejected by verify callback")
        return user, profile
