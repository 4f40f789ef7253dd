"""Unit tests for tracked file state and speed measurement."""

import pytest

from client.speed import SpeedMeter
from client.tracked_file import FileRequest, FileStatus, TrackedFile
from common.exceptions import InvalidStateTransition, ValidationError
from storage import MemoryChunkStore


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def make_tracked(**kwargs):
    request = FileRequest(file_name='report.pdf', bucket_id='bucket1', mime_type='application/pdf')
    return TrackedFile(request=request, bucket_id='bucket1', store=MemoryChunkStore(), **kwargs)


class TestFileRequest:
    """Building requests from mappings."""

    def test_from_mapping(self):
        request = FileRequest.from_mapping({'file_name': 'a.txt', 'user': 'alice', 'bucket_name': 'docs'})

        assert request.file_name == 'a.txt'
        assert request.user == 'alice'
        assert request.bucket_id is None

    def test_unknown_keys(self):
        with pytest.raises(ValidationError, match='fileName'):
            FileRequest.from_mapping({'fileName': 'a.txt', 'bucket_id': 'b'})


class TestTrackedFile:
    """Lifecycle transitions and derived values."""

    def test_initial_state(self):
        tracked = make_tracked()

        assert tracked.status == FileStatus.PENDING
        assert tracked.name == 'report.pdf'
        assert tracked.mime_type == 'application/pdf'
        assert len(tracked.file_id) == 32
        assert tracked.progress == 0.0
        assert not tracked.is_terminal

    def test_forward_path(self):
        tracked = make_tracked()

        for status in (FileStatus.TOKEN_REQUESTED, FileStatus.POINTERS_RESOLVED,
                       FileStatus.DOWNLOADING, FileStatus.COMPLETE):
            tracked.advance(status)

        assert tracked.is_terminal
        assert tracked.completed_at is not None

    def test_cannot_skip_states(self):
        tracked = make_tracked()

        with pytest.raises(InvalidStateTransition):
            tracked.advance(FileStatus.DOWNLOADING)

    def test_terminal_states_are_final(self):
        tracked = make_tracked()
        tracked.fail(RuntimeError('boom'))

        assert tracked.status == FileStatus.ERRORED
        with pytest.raises(InvalidStateTransition):
            tracked.advance(FileStatus.TOKEN_REQUESTED)
        with pytest.raises(InvalidStateTransition):
            tracked.fail(RuntimeError('again'))

    def test_progress(self):
        tracked = make_tracked(total_bytes=200)

        tracked.record_bytes(50)

        assert tracked.progress == 0.25

    def test_empty_file_progress(self):
        tracked = make_tracked(total_bytes=0, status=FileStatus.DOWNLOADING)
        assert tracked.progress == 0.0

        tracked.advance(FileStatus.COMPLETE)
        assert tracked.progress == 1.0

    def test_speed_only_while_downloading(self):
        tracked = make_tracked(total_bytes=100, status=FileStatus.POINTERS_RESOLVED)
        tracked.record_bytes(10)
        assert tracked.download_speed == 0.0

        tracked.advance(FileStatus.DOWNLOADING)
        assert tracked.download_speed > 0.0

    @pytest.mark.asyncio
    async def test_read_requires_completion(self):
        tracked = make_tracked()

        with pytest.raises(ValueError):
            await tracked.read()

    @pytest.mark.asyncio
    async def test_wait_without_task(self):
        tracked = make_tracked()

        assert await tracked.wait() is tracked


class TestSpeedMeter:
    """Sliding window rate."""

    def test_rate_over_window(self):
        clock = FakeClock()
        meter = SpeedMeter(window=5.0, clock=clock)

        meter.record(1000)
        clock.now += 1
        meter.record(1500)

        assert meter.rate() == 500.0

    def test_old_samples_expire(self):
        clock = FakeClock()
        meter = SpeedMeter(window=5.0, clock=clock)

        meter.record(1000)
        clock.now += 3
        meter.record(500)
        clock.now += 2.5

        assert meter.rate() == 100.0

        clock.now += 10
        assert meter.rate() == 0.0

    def test_reset(self):
        meter = SpeedMeter(clock=FakeClock())
        meter.record(10)

        meter.reset()

        assert meter.rate() == 0.0
