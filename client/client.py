"""Download orchestrator: resolves file references and reconstructs files from shards."""

import asyncio
import inspect
import uuid
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, TypeVar, Union

from bridge.bridge_client import BridgeClient
from client.events import EventEmitter, Listener
from client.tracked_file import FileRequest, FileStatus, TrackedFile
from common.config import ClientConfig
from common.exceptions import (
    ClientClosedError,
    DownloadError,
    PointerError,
    ResolutionError,
    TokenError,
    TransferError,
    ValidationError,
)
from common.logging_config import get_logger
from storage import ChunkStore, create_store

logger = get_logger(__name__)

T = TypeVar("T")


def _is_nonempty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


class Client:
    """
    Tracks file downloads from the bridge network.

    Events:
        file(tracked): pointers resolved, download starting
        download(tracked, nbytes): a piece of shard data arrived
        done(tracked): file fully reconstructed
        error(err): a download failed; escalated when nobody listens

    Usage:
        async with Client({'bridge': 'https://api.storj.io'}) as client:
            client.on('error', handle_error)
            tracked = client.add({'user': 'alice@example.com',
                                  'bucket_name': 'photos',
                                  'file_name': 'cat.jpg'})
            await tracked.wait()
            data = await tracked.read()
    """

    def __init__(
        self,
        options: Union[None, Mapping[str, Any], ClientConfig] = None,
        gateway: Optional[BridgeClient] = None
    ):
        """
        Initialize client.

        Args:
            options: Mapping of ClientConfig fields merged over the defaults,
                or a ready ClientConfig
            gateway: Bridge gateway to use instead of building one (tests)

        Raises:
            ConfigError: If options are malformed
        """
        self.config = ClientConfig.from_options(options)
        self._gateway = gateway if gateway is not None else BridgeClient(self.config)
        self._events = EventEmitter()
        self._files: Dict[str, TrackedFile] = {}
        self._closed = False
        self._shutdown_task: Optional[asyncio.Task] = None
        logger.info(f"Client ready [bridge={self.config.bridge}, protocol={self.config.protocol}]")

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.destroy()

    # Events

    def on(self, event: str, listener: Listener) -> Listener:
        return self._events.on(event, listener)

    def once(self, event: str, listener: Listener) -> Listener:
        return self._events.once(event, listener)

    def off(self, event: str, listener: Listener) -> bool:
        return self._events.off(event, listener)

    def emit(self, event: str, *args: Any) -> bool:
        return self._events.emit(event, *args)

    def listener_count(self, event: str) -> int:
        return self._events.listener_count(event)

    # State

    @property
    def files(self) -> List[TrackedFile]:
        """Snapshot of tracked files in insertion order."""
        return list(self._files.values())

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def progress(self) -> float:
        """Bytes received over bytes expected, across files with known size."""
        sized = [f for f in self._files.values() if f.total_bytes is not None]
        total = sum(f.total_bytes for f in sized)
        if total == 0:
            if sized and all(f.status == FileStatus.COMPLETE for f in sized):
                return 1.0
            return 0.0
        received = sum(min(f.bytes_received, f.total_bytes) for f in sized)
        return received / total

    @property
    def download_speed(self) -> float:
        """Combined speed of all downloading files, in bytes/sec."""
        return sum(f.download_speed for f in self._files.values())

    def get(self, identifier: str) -> Optional[TrackedFile]:
        """
        Look up a tracked file by id or unique id prefix.

        Returns:
            The tracked file, or None if nothing (or more than one file) matches
        """
        if identifier in self._files:
            return self._files[identifier]
        matches = [f for file_id, f in self._files.items() if file_id.startswith(identifier)]
        return matches[0] if identifier and len(matches) == 1 else None

    # Public operations

    def add(self, request: Union[FileRequest, Mapping[str, Any]]) -> TrackedFile:
        """
        Start downloading a file.

        Must be called while an event loop is running. Returns at once; the
        download proceeds in a background task.

        Args:
            request: FileRequest or mapping with file_name and either
                bucket_id or user + bucket_name

        Returns:
            TrackedFile handle for the download

        Raises:
            ValidationError: If the request is malformed
            ClientClosedError: If the client was destroyed
        """
        if self._closed:
            raise ClientClosedError("Client has been destroyed")

        request = self._validate_request(request)
        loop = asyncio.get_running_loop()

        bucket_id, resolution_error = self._resolve_bucket_id(request)

        file_id = uuid.uuid4().hex
        store = request.store if request.store is not None else self._create_store(file_id)
        tracked = TrackedFile(request=request, bucket_id=bucket_id, store=store, file_id=file_id)
        if resolution_error is not None:
            resolution_error.file_id = tracked.file_id

        self._files[tracked.file_id] = tracked
        tracked.task = loop.create_task(
            self._run_pipeline(tracked, resolution_error),
            name=f"download-{tracked.file_id}"
        )

        logger.info(f"Tracking file {tracked.name} [file_id={tracked.file_id}, bucket={bucket_id}]")
        return tracked

    async def remove(self, identifier: Union[str, TrackedFile]) -> bool:
        """
        Stop tracking a file: cancel its download and delete its stored data.

        Unknown or already removed identifiers are ignored.

        Args:
            identifier: file_id or TrackedFile

        Returns:
            True if a tracked file was removed
        """
        file_id = identifier.file_id if isinstance(identifier, TrackedFile) else identifier
        tracked = self._files.pop(file_id, None)
        if tracked is None:
            logger.debug(f"Remove ignored for unknown file [file_id={file_id}]")
            return False

        tracked.cancelled = True
        task = tracked.task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            await asyncio.wait({task})

        try:
            tracked.store.destroy()
        except OSError as e:
            logger.error(f"Failed to delete stored data for {tracked.name} [file_id={file_id}]: {e}")

        logger.info(f"Removed file {tracked.name} [file_id={file_id}]")
        return True

    async def destroy(self, callback: Optional[Callable[[], Optional[Awaitable[None]]]] = None) -> None:
        """
        Remove every tracked file and close the bridge gateway.

        Safe to call repeatedly; later calls wait for the first shutdown and
        then invoke their callback.

        Args:
            callback: Called (and awaited if async) once shutdown has settled
        """
        if self._shutdown_task is None:
            self._closed = True
            self._shutdown_task = asyncio.ensure_future(self._shutdown())
        else:
            logger.debug("Client already destroyed")

        await asyncio.shield(self._shutdown_task)

        if callback is not None:
            result = callback()
            if inspect.isawaitable(result):
                await result

    def error(self, err: DownloadError, tracked: Optional[TrackedFile] = None) -> None:
        """
        Default sink for pipeline failures.

        Delivers to 'error' listeners when any are registered, otherwise
        raises err.
        """
        if self._events.listener_count('error') > 0:
            self._events.emit('error', err)
            return
        raise err

    # Pipeline

    def _validate_request(self, request: Any) -> FileRequest:
        if isinstance(request, Mapping):
            request = FileRequest.from_mapping(request)
        elif not isinstance(request, FileRequest):
            raise ValidationError("File request must be a FileRequest or a mapping")

        if not _is_nonempty_str(request.file_name):
            raise ValidationError("file_name is required and must be a non-empty string")

        if request.bucket_id is None:
            if not _is_nonempty_str(request.user):
                raise ValidationError("user is required and must be a non-empty string if bucket_id is missing")
            if not _is_nonempty_str(request.bucket_name):
                raise ValidationError(
                    "bucket_name is required and must be a non-empty string if bucket_id is missing"
                )
        elif not _is_nonempty_str(request.bucket_id):
            raise ValidationError("bucket_id must be a non-empty string")

        if request.mime_type is not None and not isinstance(request.mime_type, str):
            raise ValidationError("mime_type must be a string")
        if request.store is not None and not isinstance(request.store, ChunkStore):
            raise ValidationError("store must implement ChunkStore")

        return request

    def _resolve_bucket_id(self, request: FileRequest) -> tuple[Optional[str], Optional[ResolutionError]]:
        if request.bucket_id is not None:
            return request.bucket_id, None

        try:
            bucket_id = self._gateway.calculate_bucket_id(request.user, request.bucket_name)
        except Exception as e:
            error = ResolutionError(f"Cannot derive bucket id for {request.user}/{request.bucket_name}: {e}")
            error.__cause__ = e
            return None, error

        if not _is_nonempty_str(bucket_id):
            return None, ResolutionError(
                f"Bucket id derivation for {request.user}/{request.bucket_name} returned {bucket_id!r}"
            )
        return bucket_id, None

    def _create_store(self, file_id: str) -> ChunkStore:
        path = Path(self.config.store_path) / file_id if self.config.store_path else None
        return create_store(self.config.store, path)

    async def _run_pipeline(self, tracked: TrackedFile, resolution_error: Optional[ResolutionError]) -> None:
        try:
            if resolution_error is not None:
                raise resolution_error

            tracked.token = await self._stage(
                tracked, TokenError, "request token",
                self._gateway.create_token(tracked.bucket_id, tracked.name)
            )
            tracked.advance(FileStatus.TOKEN_REQUESTED)

            pointers = await self._stage(
                tracked, PointerError, "resolve pointers",
                self._gateway.get_file_pointers(tracked.bucket_id, tracked.name, tracked.token)
            )
            if not pointers:
                raise PointerError(f"Bridge returned no pointers for {tracked.name}", file_id=tracked.file_id)
            tracked.pointers = list(pointers)
            tracked.total_bytes = sum(pointer.size for pointer in tracked.pointers)
            tracked.advance(FileStatus.POINTERS_RESOLVED)
            self._events.emit('file', tracked)

            tracked.advance(FileStatus.DOWNLOADING)
            logger.info(
                f"Downloading {tracked.name}: {len(tracked.pointers)} shard(s), {tracked.total_bytes} bytes "
                f"[file_id={tracked.file_id}]"
            )
            await self._stage(
                tracked, TransferError, "download shards",
                self._gateway.resolve_file_from_pointers(
                    tracked.pointers,
                    tracked.store,
                    lambda nbytes: self._on_chunk(tracked, nbytes)
                )
            )
            self._close_store(tracked)
            tracked.advance(FileStatus.COMPLETE)
            logger.info(f"Completed {tracked.name} [file_id={tracked.file_id}]")
            self._events.emit('done', tracked)

        except DownloadError as e:
            if tracked.cancelled:
                return
            if e.file_id is None:
                e.file_id = tracked.file_id
            tracked.fail(e)
            logger.error(f"Download of {tracked.name} failed in {type(e).__name__}: {e} [file_id={tracked.file_id}]")
            self.error(e, tracked)

    async def _stage(
        self,
        tracked: TrackedFile,
        error_cls: type,
        action: str,
        awaitable: Awaitable[T]
    ) -> T:
        """Await one gateway call, discarding its outcome if the file was removed meanwhile."""
        try:
            result = await awaitable
        except asyncio.CancelledError:
            raise
        except DownloadError:
            self._check_cancelled(tracked)
            raise
        except Exception as e:
            self._check_cancelled(tracked)
            raise error_cls(f"Failed to {action} for {tracked.name}: {e}", file_id=tracked.file_id) from e
        self._check_cancelled(tracked)
        return result

    def _close_store(self, tracked: TrackedFile) -> None:
        try:
            tracked.store.close()
        except (OSError, ValueError) as e:
            raise TransferError(f"Failed to finalize store for {tracked.name}: {e}", file_id=tracked.file_id) from e

    def _check_cancelled(self, tracked: TrackedFile) -> None:
        if tracked.cancelled:
            raise asyncio.CancelledError()

    def _on_chunk(self, tracked: TrackedFile, nbytes: int) -> None:
        self._check_cancelled(tracked)
        tracked.record_bytes(nbytes)
        self._events.emit('download', tracked, nbytes)

    async def _shutdown(self) -> None:
        file_ids = list(self._files)
        logger.info(f"Destroying client: {len(file_ids)} tracked file(s)")
        await asyncio.gather(*(self.remove(file_id) for file_id in file_ids))
        await self._gateway.close()
        self._events.remove_all_listeners()
        logger.info("Client destroyed")
