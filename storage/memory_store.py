"""In-memory chunk store, the default for downloads without a store."""

from typing import Dict

from storage.base import ChunkStore


class MemoryChunkStore(ChunkStore):
    """Keeps chunks in a dict keyed by index."""

    def __init__(self):
        self._chunks: Dict[int, bytes] = {}
        self._closed = False

    def put(self, index: int, data: bytes) -> None:
        if self._closed:
            raise ValueError("Store is closed")
        self._chunks[index] = bytes(data)

    def get(self, index: int) -> bytes:
        try:
            return self._chunks[index]
        except KeyError:
            raise KeyError(f"No chunk stored at index {index}") from None

    def exists(self, index: int) -> bool:
        return index in self._chunks

    def close(self) -> None:
        self._closed = True

    def destroy(self) -> None:
        self._chunks.clear()
        self._closed = True

    def __len__(self) -> int:
        return len(self._chunks)
