"""SmartLists: rule compilation and similarity engine for dynamic media lists."""

from __future__ import annotations

from smartlists.version import __version__

__all__ = ["__version__"]
