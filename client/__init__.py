"""Client-side orchestration of bridge file downloads."""

from client.client import Client
from client.tracked_file import FileRequest, FileStatus, TrackedFile

__all__ = [
    "Client",
    "FileRequest",
    "FileStatus",
    "TrackedFile",
]
