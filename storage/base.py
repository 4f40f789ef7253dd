"""Chunk store capability interface shared by all store backends."""

from abc import ABC, abstractmethod


class ChunkStore(ABC):
    """
    Indexed chunk storage that a reconstructed file is written into.

    A file's shards are put at consecutive indexes (0, 1, 2, ...) following
    pointer order, so the file's bytes are the concatenation of get(0..n-1).
    """

    @abstractmethod
    def put(self, index: int, data: bytes) -> None:
        """
        Store the chunk at index, replacing any previous chunk there.

        Raises:
            OSError: If the backend cannot persist the chunk
            ValueError: If the store has been closed or destroyed
        """

    @abstractmethod
    def get(self, index: int) -> bytes:
        """
        Read back the chunk at index.

        Raises:
            KeyError: If no chunk was stored at index
        """

    @abstractmethod
    def exists(self, index: int) -> bool:
        """Check whether a chunk is stored at index."""

    @abstractmethod
    def close(self) -> None:
        """Stop accepting writes, keeping stored chunks readable."""

    @abstractmethod
    def destroy(self) -> None:
        """Delete every stored chunk. Safe to call more than once."""

    def read_all(self, count: int) -> bytes:
        """
        Concatenate chunks 0..count-1.

        Args:
            count: Number of chunks the file was split into

        Returns:
            The reassembled bytes
        """
        return b''.join(self.get(index) for index in range(count))
