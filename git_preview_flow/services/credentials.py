"""Credential lookup for authenticated remote operations"""

import os
from dataclasses import dataclass
from typing import Optional, Protocol, Union, TYPE_CHECKING
from urllib.parse import quote, urlparse, urlunparse

from git_preview_flow.constants import OAUTH_BASIC_PASSWORD, TOKEN_ENV_VAR
from git_preview_flow.utils.logging import get_logger

if TYPE_CHECKING:
    from git_preview_flow.config import Config

logger = get_logger(__name__)


@dataclass(frozen=True)
class GitCredential:
    """Username/password pair for HTTPS git transport."""
    username: str
    password: str

    def __repr__(self) -> str:
        return "GitCredential(username='***', password='***')"


class CredentialProvider(Protocol):
    """Supplies a short-lived access token, or None when not signed in."""

    def get_token(self) -> Optional[str]:
        ...


class TokenCredentialProvider:
    """Reads the GitHub token from config, falling back to the environment.

    The token is looked up again on every call so rotation is picked up.
    """

    def __init__(self, config: Union["Config", dict, None] = None):
        self.config = config or {}

    def get_token(self) -> Optional[str]:
        token = self.config.get("github_token") or os.environ.get(TOKEN_ENV_VAR)
        if token and token.strip():
            return token.strip()
        return None


def credential_from_token(token: Optional[str]) -> Optional[GitCredential]:
    """Build the token-as-username credential GitHub accepts over HTTPS."""
    if not token:
        return None
    return GitCredential(username=token, password=OAUTH_BASIC_PASSWORD)


def get_credential(provider: Optional[CredentialProvider]) -> Optional[GitCredential]:
    """Ask ``provider`` for a token and wrap it; None if there is no provider or token."""
    if provider is None:
        return None
    try:
        token = provider.get_token()
    except Exception as e:
        # A broken keychain must not turn into a failed git operation
        logger.warning(f"Could not read access token: {e}")
        return None
    return credential_from_token(token)


def authenticated_url(url: str, credential: Optional[GitCredential]) -> str:
    """Embed ``credential`` into an HTTP(S) remote URL.

    SSH URLs and local paths are returned unchanged.
    """
    if not credential or not url:
        return url

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        return url

    host = parsed.hostname or ""
    if parsed.port:
        host = f"{host}:{parsed.port}"
    userinfo = f"{quote(credential.username, safe='')}:{quote(credential.password, safe='')}"
    return urlunparse(parsed._replace(netloc=f"{userinfo}@{host}"))


def redact(text: str, credential: Optional[GitCredential]) -> str:
    """Remove credential material from ``text`` (e.g. git error output)."""
    if not text or not credential:
        return text
    for secret in (credential.username, quote(credential.username, safe="")):
        if secret:
            text = text.replace(secret, "***")
    return text
