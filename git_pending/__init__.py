"""Find git repositories with uncommitted, unpushed or stashed work."""

__version__ = "0.1.0"
