"""Data models for git-preview-flow."""
