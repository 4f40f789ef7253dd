"""Chunk stores that reconstructed files are written into."""

from pathlib import Path
from typing import Optional, Union

from common.constants import STORE_KIND_FS, STORE_KIND_MEMORY
from storage.base import ChunkStore
from storage.fs_store import FsChunkStore
from storage.memory_store import MemoryChunkStore


def create_store(kind: str, path: Optional[Union[str, Path]] = None) -> ChunkStore:
    """
    Build a chunk store from explicit configuration.

    Args:
        kind: 'memory' or 'fs'
        path: Directory for the 'fs' store

    Returns:
        A new, empty chunk store

    Raises:
        ValueError: If kind is unknown or 'fs' is requested without a path
    """
    if kind == STORE_KIND_MEMORY:
        return MemoryChunkStore()
    if kind == STORE_KIND_FS:
        if path is None:
            raise ValueError("The fs store requires a directory path")
        return FsChunkStore(path)
    raise ValueError(f"Unknown store kind: {kind}")


__all__ = [
    "ChunkStore",
    "FsChunkStore",
    "MemoryChunkStore",
    "create_store",
]
