"""
Speech Backend Implementations.

    - EdgeBackend: Microsoft Edge read-aloud voices via edge-tts
    - AzureBackend: Azure Cognitive Services Speech REST API via httpx

Classes are imported lazily so that selecting one backend never imports
the other's library.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

__all__ = ["EdgeBackend", "AzureBackend"]


def __getattr__(name: str):
    if name == "EdgeBackend":
        from tts_bridge.tts.backends.edge_backend import EdgeBackend
        return EdgeBackend
    if name == "AzureBackend":
        from tts_bridge.tts.backends.azure_backend import AzureBackend
        return AzureBackend
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


if TYPE_CHECKING:
    from tts_bridge.tts.backends.azure_backend import AzureBackend
    from tts_bridge.tts.backends.edge_backend import EdgeBackend
