"""Unit tests for chunk stores."""

import pytest

from storage import FsChunkStore, MemoryChunkStore, create_store


@pytest.fixture(params=['memory', 'fs'])
def store(request, tmp_path):
    if request.param == 'memory':
        return MemoryChunkStore()
    return FsChunkStore(tmp_path / 'chunks')


class TestChunkStore:
    """Behavior shared by every store backend."""

    def test_put_and_get(self, store):
        store.put(0, b'hello')

        assert store.exists(0)
        assert store.get(0) == b'hello'

    def test_put_replaces(self, store):
        store.put(0, b'old')
        store.put(0, b'new')

        assert store.get(0) == b'new'

    def test_missing_chunk(self, store):
        assert not store.exists(3)
        with pytest.raises(KeyError):
            store.get(3)

    def test_read_all_concatenates_in_index_order(self, store):
        store.put(1, b'world')
        store.put(0, b'hello ')

        assert store.read_all(2) == b'hello world'

    def test_close_keeps_chunks_readable(self, store):
        store.put(0, b'data')
        store.close()

        assert store.get(0) == b'data'
        with pytest.raises(ValueError):
            store.put(1, b'more')

    def test_destroy_deletes_chunks(self, store):
        store.put(0, b'data')
        store.destroy()

        assert not store.exists(0)
        store.destroy()


class TestFsChunkStore:
    """Disk layout of the fs store."""

    def test_directory_created_lazily(self, tmp_path):
        store = FsChunkStore(tmp_path / 'lazy')

        assert not store.directory.exists()
        store.put(0, b'x')
        assert store.get_chunk_path(0) == tmp_path / 'lazy' / '0.chk'
        assert store.get_chunk_path(0).read_bytes() == b'x'

    def test_list_chunks(self, tmp_path):
        store = FsChunkStore(tmp_path / 'chunks')
        assert store.list_chunks() == []

        for index in (10, 2, 0):
            store.put(index, b'x')

        assert store.list_chunks() == [0, 2, 10]

    def test_destroy_removes_directory(self, tmp_path):
        store = FsChunkStore(tmp_path / 'chunks')
        store.put(0, b'x')

        store.destroy()

        assert not (tmp_path / 'chunks').exists()


class TestCreateStore:
    """Store factory."""

    def test_memory(self):
        assert isinstance(create_store('memory'), MemoryChunkStore)

    def test_fs(self, tmp_path):
        store = create_store('fs', tmp_path / 'chunks')

        assert isinstance(store, FsChunkStore)
        assert store.directory == tmp_path / 'chunks'

    def test_fs_requires_path(self):
        with pytest.raises(ValueError):
            create_store('fs')

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            create_store('redis')
