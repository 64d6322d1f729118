"""eventlog: dual-channel event recording.

Events travel twice: once the moment they happen (instant channel) and once
more in bulk when a session closes (batch channel). The server keeps one
append-only log per channel; the client keeps its own journal and can lay
both histories side by side afterwards.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "1.0.0"
