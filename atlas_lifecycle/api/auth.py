"""
Bearer credential providers for the Atlas API.

A credential provider is anything with a ``token()`` method returning a bearer
token. The client asks for a token on every request, so providers decide
themselves whether to cache.
"""

import time
from collections.abc import Callable
from typing import Any, Protocol

import requests

from ..utils.config import DEFAULT_AUDIENCE, DEFAULT_TOKEN_URL
from ..utils.exceptions import AuthenticationError, ConfigurationError
from ..utils.logging import get_logger

logger = get_logger(__name__)


class CredentialProvider(Protocol):
    def token(self) -> str: ...


class StaticTokenProvider:
    """Returns a token that was obtained out of band."""

    def __init__(self, token: str) -> None:
        if not token:
            raise ConfigurationError("Bearer token must not be empty")
        self._token = token

    def token(self) -> str:
        return self._token


class ClientCredentialsProvider:
    """OAuth2 client-credentials exchange with the credentials sent in the form body."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_url: str = DEFAULT_TOKEN_URL,
        audience: str = DEFAULT_AUDIENCE,
        session: requests.Session | None = None,
        timeout: float = 30,
        clock: Callable[[], float] = time.monotonic,
        expiry_leeway: float = 60,
    ) -> None:
        if not client_id or not client_secret:
            raise ConfigurationError("Client ID and client secret are required")
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.audience = audience
        self.session = session or requests.Session()
        self.timeout = timeout
        self.clock = clock
        self.expiry_leeway = expiry_leeway
        self._access_token: str | None = None
        self._expires_at: float | None = None

    def _is_fresh(self) -> bool:
        if self._access_token is None:
            return False
        if self._expires_at is None:
            return True
        return self.clock() < self._expires_at - self.expiry_leeway

    def token(self) -> str:
        if self._is_fresh():
            return self._access_token  # type: ignore[return-value]

        logger.info(f"Requesting access token from {self.token_url}")
        try:
            response = self.session.post(
                self.token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "audience": self.audience,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AuthenticationError(f"Token request failed: {e}")

        if response.status_code != 200:
            raise AuthenticationError(
                f"{response.status_code} {response.reason}", response.status_code
            )

        try:
            payload: dict[str, Any] = response.json()
        except ValueError:
            raise AuthenticationError("Token endpoint returned invalid JSON", 200)

        access_token = payload.get("access_token")
        if not access_token:
            raise AuthenticationError("Token endpoint returned no access_token", 200)

        self._access_token = access_token
        expires_in = payload.get("expires_in")
        self._expires_at = (
            self.clock() + float(expires_in) if expires_in is not None else None
        )
        logger.debug("Obtained access token")
        return access_token


def credential_provider_from_config(
    config: dict[str, Any], session: requests.Session | None = None
) -> CredentialProvider:
    """Pick a static token if one is configured, else the client-credentials flow."""
    token = config.get("ATLAS_TOKEN")
    if token:
        return StaticTokenProvider(token)

    client_id = config.get("ATLAS_CLIENT_ID")
    client_secret = config.get("ATLAS_CLIENT_SECRET")
    if not client_id:
        raise ConfigurationError(
            "Missing required configuration: ATLAS_CLIENT_ID (or set ATLAS_TOKEN)"
        )
    if not client_secret:
        raise ConfigurationError(
            "Missing required configuration: ATLAS_CLIENT_SECRET (or set ATLAS_TOKEN)"
        )

    return ClientCredentialsProvider(
        client_id=client_id,
        client_secret=client_secret,
        token_url=config.get("ATLAS_TOKEN_URL") or DEFAULT_TOKEN_URL,
        audience=config.get("ATLAS_AUDIENCE") or DEFAULT_AUDIENCE,
        session=session,
        timeout=float(config.get("ATLAS_REQUEST_TIMEOUT", 30)),
    )
