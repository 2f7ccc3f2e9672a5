"""
tradescope - Institutional Trade Analytics

Public API for turning a CSV of strategy trades into an analytics report.
"""

from importlib.metadata import version

try:
    __version__ = version("tradescope")
except Exception:
    __version__ = "0.0.0.dev"  # Fallback for development


__all__ = [
    "__version__",
]
