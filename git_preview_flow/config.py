"""Configuration handling for git-preview-flow"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List

from git_preview_flow.constants import (
    BRANCH_NAME_PATTERN,
    DATA_DIR_NAME,
    DEFAULT_BASE_BRANCHES,
    DEFAULT_REMOTE_NAME,
    PREVIEW_BRANCH,
)


@dataclass
class Config:
    """Configuration for git-preview-flow with validation."""

    # Branch workflow
    remote_name: str = DEFAULT_REMOTE_NAME
    preview_branch: str = PREVIEW_BRANCH
    base_branches: List[str] = field(default_factory=lambda: list(DEFAULT_BASE_BRANCHES))

    # Authentication (falls back to GITHUB_TOKEN at lookup time)
    github_token: Optional[str] = None

    # Project registry location (None = ~/.git-preview-flow)
    data_dir: Optional[str] = None

    # Output
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_remote_name()
        self._validate_preview_branch()
        self._validate_base_branches()

    def _validate_remote_name(self):
        """Validate remote_name is not empty."""
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()

    def _validate_preview_branch(self):
        """Validate preview_branch is a legal branch name."""
        if not self.preview_branch or not BRANCH_NAME_PATTERN.fullmatch(self.preview_branch):
            raise ValueError(f"preview_branch is not a valid branch name: '{self.preview_branch}'")

    def _validate_base_branches(self):
        """Validate base_branches is a non-empty list of names."""
        if not isinstance(self.base_branches, list) or not self.base_branches:
            raise ValueError("base_branches must be a non-empty list")
        for name in self.base_branches:
            if not isinstance(name, str) or not BRANCH_NAME_PATTERN.fullmatch(name):
                raise ValueError(f"base_branches contains an invalid branch name: '{name}'")
        if self.preview_branch in self.base_branches:
            raise ValueError("preview_branch cannot also be a base branch")

    @property
    def data_path(self) -> Path:
        """Directory holding the project registry and logs."""
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return Path.home() / DATA_DIR_NAME

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "remote_name": self.remote_name,
            "preview_branch": self.preview_branch,
            "base_branches": self.base_branches,
            "github_token": self.github_token,
            "data_dir": self.data_dir,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    def get(self, key: str, default=None):
        """Get config value by key for dict-style access."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary."""
        # Extract only known fields
        known_fields = {
            "remote_name",
            "preview_branch",
            "base_branches",
            "github_token",
            "data_dir",
            "verbose",
            "debug",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)

    @classmethod
    def coerce(cls, config) -> "Config":
        """Return a Config for either a Config, a dict, or None."""
        if config is None:
            return cls()
        if isinstance(config, dict):
            return cls.from_dict(config)
        return config
