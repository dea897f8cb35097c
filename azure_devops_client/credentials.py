"""Credential variants and how each one is attached to a request."""

import base64
from dataclasses import dataclass, field

from .models import AuthenticationConstraint

# Azure DevOps ignores the user name of a PAT sent as Basic auth
BASIC_USERNAME = "pat"


@dataclass(frozen=True)
class Token:
    """OAuth token, sent as ``Authorization: token <token>``."""

    token: str


@dataclass(frozen=True)
class Basic:
    """Personal access token, sent as Basic auth."""

    token: str


@dataclass(frozen=True)
class ClientSecret:
    """OAuth client id and secret, sent as query parameters."""

    client_id: str
    client_secret: str = field(repr=False)


Credentials = Token | Basic | ClientSecret


@dataclass(frozen=True)
class ResolvedAuth:
    query_params: dict[str, str] = field(default_factory=dict)
    authorization: str | None = None


def resolve_credentials(
    credentials: Credentials | None,
    authentication: AuthenticationConstraint = AuthenticationConstraint.UNCONSTRAINED,
) -> ResolvedAuth:
    """Turn the configured credential into query params or a header value.

    Exactly one of the two is produced for a credential, neither without one.
    ``authentication`` only has the unconstrained form today, under which the
    configured credential is always used.
    """
    if credentials is None:
        return ResolvedAuth()
    if isinstance(credentials, ClientSecret):
        return ResolvedAuth(
            query_params={
                "client_id": credentials.client_id,
                "client_secret": credentials.client_secret,
            }
        )
    if isinstance(credentials, Token):
        return ResolvedAuth(authorization=f"token {credentials.token}")
    if isinstance(credentials, Basic):
        raw = f"{BASIC_USERNAME}:{credentials.token}".encode()
        return ResolvedAuth(authorization=f"Basic {base64.b64encode(raw).decode('ascii')}")
    raise TypeError(f"Unknown credentials type: {type(credentials).__name__}")
