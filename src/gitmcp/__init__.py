"""gitmcp package.

Git repository operations exposed as Model Context Protocol tools and as
short shell aliases. Every operation runs the local ``git`` binary.
"""

__version__ = "1.8.3"

__all__ = [
    "config",
    "log",
    "git",
    "mcp",
    "cli",
    "aliases",
]
