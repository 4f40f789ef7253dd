"""Integration tests: Client driving a real BridgeClient over a mocked network."""

import httpx
import pytest

from bridge.bridge_client import BridgeClient
from client import Client, FileStatus
from common.config import ClientConfig
from common.exceptions import PointerError, TransferError
from conftest import SHARDS


def make_client(transport, **options):
    config = ClientConfig.from_options({'bridge': 'http://bridge.test', 'max_retries': 0, **options})
    return Client(config, gateway=BridgeClient(config, transport=transport))


@pytest.mark.asyncio
async def test_download_by_user_and_bucket_name(network):
    """Test full flow: derive bucket, token, pointers, shards into memory."""
    client = make_client(network)

    tracked = client.add({'file_name': 'report.pdf', 'user': 'alice@example.com', 'bucket_name': 'photos'})
    await tracked.wait()

    assert tracked.status == FileStatus.COMPLETE
    assert await tracked.read() == b''.join(SHARDS['report.pdf'])
    token_request = network.requests[0]
    assert token_request.url.path == '/buckets/4e315ff0baf7906f6d25aca4/tokens'
    assert tracked.token.token == 'token-4e315ff0baf7906f6d25aca4'

    await client.destroy()


@pytest.mark.asyncio
async def test_download_into_fs_store(network, tmp_path):
    """Test configured fs store persists chunks per tracked file."""
    client = make_client(network, store='fs', store_path=str(tmp_path))

    tracked = client.add({'file_name': 'cat.jpg', 'bucket_id': 'bucket1'})
    await tracked.wait()

    chunk_dir = tmp_path / tracked.file_id
    assert (chunk_dir / '0.chk').read_bytes() == SHARDS['cat.jpg'][0]

    await client.destroy()
    assert not chunk_dir.exists()


@pytest.mark.asyncio
async def test_missing_file_reports_pointer_error(network):
    """Test bridge 404 surfaces as a PointerError event."""
    client = make_client(network)
    errors = []
    client.on('error', errors.append)

    tracked = client.add({'file_name': 'missing.txt', 'bucket_id': 'bucket1'})
    await tracked.wait()

    assert tracked.status == FileStatus.ERRORED
    assert len(errors) == 1
    assert isinstance(errors[0], PointerError)
    assert errors[0].__cause__.status_code == 404

    await client.destroy()


@pytest.mark.asyncio
async def test_farmer_failure_reports_transfer_error(network):
    """Test a refusing farmer surfaces as a TransferError after partial progress."""
    def handler(request):
        if request.url.path.startswith('/shards/') and request.url.host == '10.0.0.2':
            return httpx.Response(503)
        return network.handler(request)

    client = make_client(httpx.MockTransport(handler))
    errors = []
    client.on('error', errors.append)

    tracked = client.add({'file_name': 'report.pdf', 'bucket_id': 'bucket1'})
    await tracked.wait()

    assert [type(e) for e in errors] == [TransferError]
    assert tracked.bytes_received == len(SHARDS['report.pdf'][0])
    assert 0 < client.progress < 1

    await client.destroy()


@pytest.mark.asyncio
async def test_concurrent_downloads_share_gateway(network):
    """Test several files download concurrently through one client."""
    client = make_client(network)
    done = []
    client.on('done', lambda tracked: done.append(tracked.name))

    report = client.add({'file_name': 'report.pdf', 'bucket_id': 'bucket1'})
    cat = client.add({'file_name': 'cat.jpg', 'bucket_id': 'bucket1'})
    await report.wait()
    await cat.wait()

    assert sorted(done) == ['cat.jpg', 'report.pdf']
    assert client.progress == 1.0

    callback_calls = []
    await client.destroy(lambda: callback_calls.append(True))
    await client.destroy(lambda: callback_calls.append(True))
    assert callback_calls == [True, True]
