"""Tool handlers, one module per group of git operations."""
