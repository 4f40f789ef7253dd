"""Disk-backed chunk store: one .chk file per chunk index under a directory."""

import shutil
from pathlib import Path
from typing import Union

from common.logging_config import get_logger
from storage.base import ChunkStore

logger = get_logger(__name__)


class FsChunkStore(ChunkStore):
    """
    Persists chunks as files under a dedicated directory.

    The directory is created lazily on first write and removed by destroy().
    """

    def __init__(self, directory: Union[str, Path]):
        """
        Initialize the store.

        Args:
            directory: Directory owned by this store (one per tracked file)
        """
        self.directory = Path(directory)
        self._closed = False

    def get_chunk_path(self, index: int) -> Path:
        """
        Get file path for a chunk.

        Args:
            index: Position of the chunk within the file

        Returns:
            Path object for the chunk file
        """
        return self.directory / f"{index}.chk"

    def put(self, index: int, data: bytes) -> None:
        """
        Write chunk data to disk.

        Raises:
            OSError: If write operation fails
            ValueError: If the store is closed
        """
        if self._closed:
            raise ValueError(f"Store {self.directory} is closed")
        self.directory.mkdir(parents=True, exist_ok=True)
        self.get_chunk_path(index).write_bytes(data)

    def get(self, index: int) -> bytes:
        """
        Read entire chunk from disk.

        Raises:
            KeyError: If chunk does not exist
        """
        filepath = self.get_chunk_path(index)
        try:
            return filepath.read_bytes()
        except FileNotFoundError:
            raise KeyError(f"No chunk stored at index {index}") from None

    def exists(self, index: int) -> bool:
        return self.get_chunk_path(index).exists()

    def close(self) -> None:
        self._closed = True

    def destroy(self) -> None:
        """Remove the store directory and every chunk in it."""
        self._closed = True
        if self.directory.exists():
            shutil.rmtree(self.directory)
            logger.debug(f"Removed chunk directory {self.directory}")

    def list_chunks(self) -> list[int]:
        """
        List stored chunk indexes in ascending order.

        Returns:
            Chunk indexes (file names without .chk extension)
        """
        if not self.directory.exists():
            return []
        return sorted(int(path.stem) for path in self.directory.glob("*.chk"))
