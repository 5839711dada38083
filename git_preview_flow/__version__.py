"""Version information for git-preview-flow."""

__version__ = "0.1.0"
