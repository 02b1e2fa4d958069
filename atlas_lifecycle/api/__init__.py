"""
Atlas API access: HTTP client and credential providers.
"""

from .auth import (
    ClientCredentialsProvider,
    CredentialProvider,
    StaticTokenProvider,
    credential_provider_from_config,
)
from .client import ApiResponse, AtlasClient, client_from_config

__all__ = [
    "ApiResponse",
    "AtlasClient",
    "client_from_config",
    "CredentialProvider",
    "StaticTokenProvider",
    "ClientCredentialsProvider",
    "credential_provider_from_config",
]
