"""Shared pytest fixtures for all tests."""

import hashlib
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from bridge.bridge_client import BridgeClient
from cli.config import Config
from common.bucket_id import calculate_bucket_id
from common.types import AccessToken, FarmerContact, Pointer


SHARDS = {
    'report.pdf': [b'first shard of the report ', b'second shard ', b'tail'],
    'cat.jpg': [b'\x89JPEG' + b'\x00' * 60],
}


def make_pointer(index: int, data: bytes, port: int = 4000) -> Pointer:
    """
    Build a pointer describing data as shard `index`.

    Args:
        index: Shard position
        data: Shard content (hash and size are derived from it)
        port: Farmer port

    Returns:
        Pointer served by farmer 10.0.0.<index + 1>
    """
    return Pointer(
        index=index,
        hash=hashlib.sha256(data).hexdigest()[:40],
        size=len(data),
        token=f'farmer-token-{index}',
        farmer=FarmerContact(address=f'10.0.0.{index + 1}', port=port, node_id=f'node{index}'),
    )


def pointer_payload(pointer: Pointer) -> dict:
    """Serialize a pointer the way the bridge does."""
    return {
        'index': pointer.index,
        'hash': pointer.hash,
        'size': pointer.size,
        'token': pointer.token,
        'operation': pointer.operation,
        'farmer': {
            'address': pointer.farmer.address,
            'port': pointer.farmer.port,
            'nodeID': pointer.farmer.node_id,
        },
    }


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Returns:
        Path to temporary .bridgefetch directory
    """
    config_dir = tmp_path / '.bridgefetch'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary CLI config instance.

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def gateway():
    """
    Bridge gateway double serving the files in SHARDS.

    create_token and get_file_pointers succeed for every known file;
    resolve_file_from_pointers writes each shard into the store and reports
    its size through on_chunk.
    """
    gw = Mock(spec=BridgeClient)
    gw.calculate_bucket_id = Mock(side_effect=calculate_bucket_id)

    async def create_token(bucket_id, file_name):
        return AccessToken(token=f'token-{file_name}', bucket=bucket_id, operation='PULL')

    async def get_file_pointers(bucket_id, file_name, token):
        return [make_pointer(i, data) for i, data in enumerate(SHARDS[file_name])]

    contents = {
        make_pointer(i, data).hash: data
        for shards in SHARDS.values()
        for i, data in enumerate(shards)
    }

    async def resolve_file_from_pointers(pointers, store, on_chunk=None):
        total = 0
        for position, pointer in enumerate(pointers):
            data = contents[pointer.hash]
            if on_chunk is not None:
                on_chunk(len(data))
            store.put(position, data)
            total += len(data)
        return total

    gw.create_token = AsyncMock(side_effect=create_token)
    gw.get_file_pointers = AsyncMock(side_effect=get_file_pointers)
    gw.resolve_file_from_pointers = AsyncMock(side_effect=resolve_file_from_pointers)
    gw.close = AsyncMock()
    return gw


@pytest.fixture
def network():
    """
    Mock transport playing both the bridge and the farmers for SHARDS.

    Exposes `requests` (every request seen) on the returned transport.
    """
    pointers = {
        name: [make_pointer(i, data) for i, data in enumerate(shards)]
        for name, shards in SHARDS.items()
    }
    contents = {
        pointer.hash: data
        for name, shards in SHARDS.items()
        for pointer, data in zip(pointers[name], shards)
    }
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        path = request.url.path

        if request.url.host == 'bridge.test':
            parts = path.strip('/').split('/')
            if request.method == 'POST' and len(parts) == 3 and parts[2] == 'tokens':
                return httpx.Response(201, json={
                    'token': f'token-{parts[1]}',
                    'bucket': parts[1],
                    'operation': 'PULL',
                    'expires': '2026-10-18T12:00:00.000Z',
                })
            if request.method == 'GET' and len(parts) == 4 and parts[2] == 'files':
                name = parts[3]
                if name not in pointers:
                    return httpx.Response(404, json={'error': 'File not found'})
                if not request.headers.get('x-token'):
                    return httpx.Response(401, json={'error': 'Missing token'})
                skip = int(request.url.params.get('skip', 0))
                limit = int(request.url.params.get('limit', 6))
                page = pointers[name][skip:skip + limit]
                return httpx.Response(200, json=[pointer_payload(p) for p in page])
            return httpx.Response(404, json={'error': 'Not found'})

        if path.startswith('/shards/'):
            shard_hash = path.rsplit('/', 1)[-1]
            if shard_hash in contents and request.url.params.get('token'):
                return httpx.Response(200, content=contents[shard_hash])
            return httpx.Response(404)

        return httpx.Response(404)

    transport = httpx.MockTransport(handler)
    transport.requests = seen
    return transport
