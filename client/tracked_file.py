"""File requests and the client's record of each download."""

import asyncio
import uuid
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Mapping, Optional

from client.speed import SpeedMeter
from common.exceptions import InvalidStateTransition, ValidationError
from common.types import AccessToken, Pointer
from storage.base import ChunkStore


class FileStatus(str, Enum):
    """Lifecycle of a tracked file."""

    PENDING = "pending"
    TOKEN_REQUESTED = "token_requested"
    POINTERS_RESOLVED = "pointers_resolved"
    DOWNLOADING = "downloading"
    COMPLETE = "complete"
    ERRORED = "errored"


_TRANSITIONS = {
    FileStatus.PENDING: {FileStatus.TOKEN_REQUESTED, FileStatus.ERRORED},
    FileStatus.TOKEN_REQUESTED: {FileStatus.POINTERS_RESOLVED, FileStatus.ERRORED},
    FileStatus.POINTERS_RESOLVED: {FileStatus.DOWNLOADING, FileStatus.ERRORED},
    FileStatus.DOWNLOADING: {FileStatus.COMPLETE, FileStatus.ERRORED},
    FileStatus.COMPLETE: set(),
    FileStatus.ERRORED: set(),
}


@dataclass(frozen=True)
class FileRequest:
    """
    What to download.

    Either bucket_id, or user and bucket_name, identify the bucket.
    Field checks happen in Client.add.
    """

    file_name: Optional[str] = None
    bucket_id: Optional[str] = None
    user: Optional[str] = None
    bucket_name: Optional[str] = None
    mime_type: Optional[str] = None
    store: Optional[ChunkStore] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FileRequest":
        """
        Build a request from a plain mapping.

        Raises:
            ValidationError: If the mapping has keys this request does not know
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValidationError(f"Unknown file request fields: {', '.join(sorted(map(str, unknown)))}")
        return cls(**data)


@dataclass(eq=False)
class TrackedFile:
    """
    A download the client is tracking; also the handle returned by add().

    Attributes:
        request: The validated request
        bucket_id: Resolved bucket id (None when derivation failed)
        store: Chunk store receiving the shards
        file_id: Unique id of this download
        status: Current lifecycle state
        bytes_received: Bytes pulled from farmers so far
        total_bytes: Sum of pointer sizes, unknown until pointers resolve
    """

    request: FileRequest
    bucket_id: Optional[str]
    store: ChunkStore
    file_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: FileStatus = FileStatus.PENDING
    bytes_received: int = 0
    total_bytes: Optional[int] = None
    token: Optional[AccessToken] = field(default=None, repr=False)
    pointers: List[Pointer] = field(default_factory=list, repr=False)
    error: Optional[BaseException] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
    cancelled: bool = False
    task: Optional[asyncio.Task] = field(default=None, repr=False)
    speed: SpeedMeter = field(default_factory=SpeedMeter, repr=False)

    @property
    def name(self) -> str:
        return self.request.file_name

    @property
    def mime_type(self) -> Optional[str]:
        return self.request.mime_type

    @property
    def is_terminal(self) -> bool:
        return self.status in (FileStatus.COMPLETE, FileStatus.ERRORED)

    @property
    def progress(self) -> float:
        """Fraction of this file received, 0..1."""
        if not self.total_bytes:
            return 1.0 if self.status == FileStatus.COMPLETE else 0.0
        return min(self.bytes_received / self.total_bytes, 1.0)

    @property
    def download_speed(self) -> float:
        """Current speed in bytes/sec; zero unless shards are streaming."""
        if self.status != FileStatus.DOWNLOADING:
            return 0.0
        return self.speed.rate()

    def advance(self, status: FileStatus) -> None:
        """
        Move to the next lifecycle state.

        Raises:
            InvalidStateTransition: If status is not reachable from the current state
        """
        if status not in _TRANSITIONS[self.status]:
            raise InvalidStateTransition(
                f"File {self.file_id} cannot go from {self.status.value} to {status.value}"
            )
        self.status = status
        if status == FileStatus.COMPLETE:
            self.completed_at = datetime.now(timezone.utc)

    def fail(self, error: BaseException) -> None:
        self.advance(FileStatus.ERRORED)
        self.error = error

    def record_bytes(self, nbytes: int) -> None:
        self.bytes_received += nbytes
        self.speed.record(nbytes)

    async def wait(self) -> "TrackedFile":
        """
        Wait for the download pipeline to settle.

        Returns:
            This tracked file

        Raises:
            DownloadError: If the download failed and no error listener was registered
            asyncio.CancelledError: If the file was removed before finishing
        """
        if self.task is not None:
            await self.task
        return self

    async def read(self) -> bytes:
        """
        Read the reconstructed file back from its store.

        Raises:
            ValueError: If the download has not completed
        """
        if self.status != FileStatus.COMPLETE:
            raise ValueError(f"File {self.name} is not complete (status={self.status.value})")
        return self.store.read_all(len(self.pointers))
