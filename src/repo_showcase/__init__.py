"""repo-showcase: cached GitHub repository listings for portfolio sites."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("repo-showcase")
except PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = ["__version__"]
