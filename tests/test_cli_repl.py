"""Tests for REPL dispatch and event printing."""

import pytest

from client import Client
from cli.models import AddCommand, ListCommand, StatusCommand
from cli.repl import attach_printers, dispatch_command


@pytest.mark.asyncio
async def test_dispatch_routes_to_handlers(gateway):
    client = Client(gateway=gateway)

    added = await dispatch_command(AddCommand(file_name='cat.jpg', bucket_id='bucket1'), client)
    await client.files[0].wait()
    listed = await dispatch_command(ListCommand(), client)
    status = await dispatch_command(StatusCommand(), client)

    assert added.startswith('Tracking cat.jpg')
    assert 'Tracking 1 file(s)' in listed
    assert 'Files: 1 (0 active, 1 complete, 0 failed)' in status


@pytest.mark.asyncio
async def test_dispatch_unknown_object(gateway):
    client = Client(gateway=gateway)

    assert (await dispatch_command(object(), client)).startswith('Unknown command type')


@pytest.mark.asyncio
async def test_printers_report_lifecycle(gateway, capsys):
    client = Client(gateway=gateway)
    attach_printers(client)

    tracked = client.add({'file_name': 'cat.jpg', 'bucket_id': 'bucket1'})
    await tracked.wait()

    out = capsys.readouterr().out
    assert f"Started cat.jpg (65 B, ID: {tracked.file_id[:8]}...)" in out
    assert 'Completed' in out


@pytest.mark.asyncio
async def test_printers_report_failures(gateway, capsys):
    gateway.create_token.side_effect = RuntimeError('403 forbidden')
    client = Client(gateway=gateway)
    attach_printers(client)

    tracked = client.add({'file_name': 'cat.jpg', 'bucket_id': 'bucket1'})
    await tracked.wait()

    out = capsys.readouterr().out
    assert f"Failed\x1b[0m (ID: {tracked.file_id[:8]}...)" in out
    assert '403 forbidden' in out
