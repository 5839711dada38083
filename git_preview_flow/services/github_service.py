"""GitHub account lookup"""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from github import Auth, Github, GithubException

from git_preview_flow.utils.logging import get_logger

if TYPE_CHECKING:
    from git_preview_flow.services.credentials import CredentialProvider

logger = get_logger(__name__)


@dataclass(frozen=True)
class GitHubUser:
    """The account the access token belongs to."""
    login: str
    name: str
    email: str


class GitHubAccountService:
    """Looks up the signed-in GitHub user, e.g. to derive a commit identity."""

    def __init__(self, credentials: "CredentialProvider"):
        self.credentials = credentials

    def get_user_info(self) -> Optional[GitHubUser]:
        """Fetch the authenticated user, or None if there is no token or the API fails."""
        token = self.credentials.get_token() if self.credentials else None
        if not token:
            logger.warning("[GitHub] No access token available for user lookup")
            return None

        try:
            github = Github(auth=Auth.Token(token))
            user = github.get_user()
            login = user.login
            # Accounts with a private email still get a deliverable noreply address
            email = user.email or f"{user.id}+{login}@users.noreply.github.com"
            info = GitHubUser(login=login, name=user.name or login, email=email)
        except GithubException as e:
            logger.warning(f"[GitHub] Failed to fetch user info: {e}")
            return None

        logger.debug(f"[GitHub] Authenticated as {info.login}")
        return info
