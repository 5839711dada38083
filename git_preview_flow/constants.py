"""Shared constants for git-preview-flow."""

import re

DEFAULT_REMOTE_NAME = "origin"
PREVIEW_BRANCH = "preview"
DEFAULT_BASE_BRANCHES = ["main", "master"]

# Letters, digits, dots, hyphens and underscores only
BRANCH_NAME_PATTERN = re.compile(r"[a-zA-Z0-9._-]+")

# Password GitHub accepts alongside a token passed as the username
OAUTH_BASIC_PASSWORD = "x-oauth-basic"

TOKEN_ENV_VAR = "GITHUB_TOKEN"

DATA_DIR_NAME = ".git-preview-flow"
PROJECTS_FILE_NAME = "projects.json"
LOG_FILE_NAME = "git-preview-flow.log"


# Symbol constants
SYMBOL_LOCAL = "L"
SYMBOL_REMOTE = "R"
SYMBOL_CURRENT_BRANCH = " *"
