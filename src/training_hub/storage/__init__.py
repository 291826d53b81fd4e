"""Almacenes clave-valor."""

from .client import (
    FileStorageClient,
    InMemoryStorageClient,
    Namespaces,
    StorageClient,
    StorageError,
)

__all__ = [
    "FileStorageClient",
    "InMemoryStorageClient",
    "Namespaces",
    "StorageClient",
    "StorageError",
]
