"""
Generic OAuth 2.0 engine used by the Dropbox strategy.

The authorization-code handshake is handled by authlib's OAuth2Session;
protected resource requests go through httpx. The strategy only talks to
this class, so tests can substitute any object with the same methods.
"""

import logging
from typing import Mapping, Optional, Sequence

import httpx
from authlib.integrations.requests_client import OAuth2Session

logger = logging.getLogger(__name__)


class OAuth2Engine:
    """Authorization-code flow plus token-authenticated HTTP requests."""

    def __init__(
        self,
        authorization_url: str,
        token_url: str,
        client_id: str,
        client_secret: str,
        callback_url: str = "",
        scope_separator: str = " ",
        custom_headers: Optional[Mapping[str, str]] = None,
        use_authorization_header_for_get: bool = False,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the engine.

        Args:
            authorization_url: Provider authorization endpoint
            token_url: Provider token endpoint
            client_id: OAuth2 client ID (app key)
            client_secret: OAuth2 client secret (app secret)
            callback_url: Redirect URI registered with the provider
            scope_separator: Character used to join requested scopes
            custom_headers: Headers sent with every resource request
            use_authorization_header_for_get: Send the token of ``get`` as a
                bearer header instead of the ``access_token`` query parameter
            http_client: Optional httpx client used for resource requests
        """
        self.authorization_endpoint = authorization_url
        self.token_endpoint = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.callback_url = callback_url
        self.scope_separator = scope_separator
        self.custom_headers = dict(custom_headers or {})
        self.use_authorization_header_for_get = use_authorization_header_for_get
        self._http_client = http_client

    def _session(self, scope: Optional[str] = None) -> OAuth2Session:
        return OAuth2Session(
            client_id=self.client_id,
            client_secret=self.client_secret,
            redirect_uri=self.callback_url or None,
            scope=scope,
        )

    def authorization_url(self, state: str, scope: Optional[Sequence[str]] = None, **params) -> str:
        """Build the URL the user agent is redirected to for authorization."""
        joined_scope = self.scope_separator.join(scope) if scope else None
        oauth = self._session(scope=joined_scope)
        url, _ = oauth.create_authorization_url(
            self.authorization_endpoint,
            state=state,
            **params,
        )
        return url

    def fetch_token(self, code: str, authorization_response: Optional[str] = None) -> dict:
        """Exchange an authorization code for an access token."""
        oauth = self._session()
        kwargs = {"code": code}
        if authorization_response:
            kwargs["authorization_response"] = authorization_response
        token = oauth.fetch_token(self.token_endpoint, **kwargs)
        logger.debug(f"Token response keys: {sorted(token.keys())}")
        return dict(token)

    @staticmethod
    def build_auth_header(access_token: str) -> str:
        """Return the value of an ``Authorization`` header for a bearer token."""
        return f"Bearer {access_token}"

    def get(self, url: str, access_token: str) -> str:
        """Issue a token-authenticated GET and return the response body."""
        headers = {}
        if self.use_authorization_header_for_get:
            headers["Authorization"] = self.build_auth_header(access_token)
            return self.request("GET", url, headers=headers)
        return self.request("GET", url, headers=headers, access_token=access_token)

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
        access_token: Optional[str] = None,
    ) -> str:
        """
        Issue an HTTP request and return the response body as text.

        Custom headers are applied first, explicit ``headers`` override them.
        When ``access_token`` is given and no Authorization header is set,
        the token is sent as the ``access_token`` query parameter.

        Raises:
            httpx.RequestError: the request could not be sent
            httpx.HTTPStatusError: the provider answered with a non-2xx status
        """
        merged_headers = {**self.custom_headers, **(headers or {})}
        params = {}
        if access_token and "Authorization" not in merged_headers:
            params["access_token"] = access_token

        content = body.encode("utf-8") if isinstance(body, str) else body

        logger.debug(f"{method} {url}")
        if self._http_client is not None:
            response = self._http_client.request(
                method, url, headers=merged_headers, params=params or None, content=content
            )
        else:
            with httpx.Client() as client:
                response = client.request(
                    method, url, headers=merged_headers, params=params or None, content=content
                )

        response.raise_for_status()
        return response.text
