"""Domain interfaces implemented by the infrastructure layer."""

from .interfaces import AuthProvider, KeyValueStorage, TrackCatalogProtocol

__all__ = ["AuthProvider", "KeyValueStorage", "TrackCatalogProtocol"]
