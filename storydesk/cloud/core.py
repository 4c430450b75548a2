"""Cloud store initialization and the shared client handle."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .client import SupabaseClient

IMAGE_BUCKET = "story-images"

_client: SupabaseClient | None = None


def init_cloud(client: SupabaseClient | None) -> None:
    """Install (or clear, with None) the client every cloud function uses."""
    global _client
    _client = client


def is_configured() -> bool:
    return _client is not None


def client() -> SupabaseClient:
    assert _client is not None, "Call init_cloud() before using the cloud store"
    return _client
