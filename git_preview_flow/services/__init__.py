"""Services for git-preview-flow."""
