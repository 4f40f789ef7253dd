"""Command handler functions for CLI operations."""

import asyncio
from pathlib import Path
from typing import Optional

from client import Client, FileStatus, TrackedFile
from cli.constants import GREEN, RED, RESET
from cli.models import (
    AddCommand,
    ListCommand,
    RemoveCommand,
    SaveCommand,
    StatusCommand,
)
from cli.utils import format_file_size, format_progress, format_speed, normalize_output_path
from common.exceptions import ValidationError
from common.logging_config import get_logger

logger = get_logger(__name__)


def describe_file(tracked: TrackedFile) -> str:
    """
    One-entry summary of a tracked file for list output.

    Args:
        tracked: File to describe

    Returns:
        Multi-line description
    """
    if tracked.status == FileStatus.COMPLETE:
        status = f"{GREEN}{tracked.status.value}{RESET}"
    elif tracked.status == FileStatus.ERRORED:
        status = f"{RED}{tracked.status.value}{RESET}"
    else:
        status = tracked.status.value

    size = format_file_size(tracked.total_bytes) if tracked.total_bytes is not None else "unknown"
    lines = [
        f"  - {tracked.name} (ID: {tracked.file_id[:8]}...)",
        f"    Bucket: {tracked.bucket_id or '-'}",
        f"    Status: {status}",
        f"    Progress: {format_progress(tracked.progress)} of {size}",
    ]
    if tracked.status == FileStatus.DOWNLOADING:
        lines.append(f"    Speed: {format_speed(tracked.download_speed)}")
    if tracked.error is not None:
        lines.append(f"    Error: {tracked.error}")
    return '\n'.join(lines)


def _write_output(output_file: Path, data: bytes) -> None:
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_bytes(data)


async def handle_add(cmd: AddCommand, client: Client) -> str:
    """
    Handle 'add' command.

    Args:
        cmd: AddCommand with the file reference
        client: Client tracking downloads

    Returns:
        Confirmation with the new file id, or a validation error
    """
    logger.info(f"Executing add command: file={cmd.file_name}")
    request = {'file_name': cmd.file_name}
    if cmd.bucket_id is not None:
        request['bucket_id'] = cmd.bucket_id
    else:
        request['user'] = cmd.user
        request['bucket_name'] = cmd.bucket_name

    try:
        tracked = client.add(request)
    except ValidationError as e:
        return f"Error: {e}"

    return f"Tracking {tracked.name} (ID: {tracked.file_id[:8]}...)"


async def handle_list(cmd: ListCommand, client: Client) -> str:
    """
    Handle 'list' command.

    Returns:
        Formatted list of tracked files
    """
    files = client.files
    if not files:
        return "No files tracked."

    output = [f"Tracking {len(files)} file(s):\n"]
    output.extend(describe_file(tracked) for tracked in files)
    return '\n'.join(output)


async def handle_status(cmd: StatusCommand, client: Client) -> str:
    """
    Handle 'status' command.

    Returns:
        Aggregate progress and speed across tracked files
    """
    files = client.files
    complete = sum(1 for f in files if f.status == FileStatus.COMPLETE)
    errored = sum(1 for f in files if f.status == FileStatus.ERRORED)
    active = len(files) - complete - errored
    return (
        f"Files: {len(files)} ({active} active, {complete} complete, {errored} failed)\n"
        f"Progress: {format_progress(client.progress)}\n"
        f"Speed: {format_speed(client.download_speed)}"
    )


async def handle_remove(cmd: RemoveCommand, client: Client) -> str:
    """
    Handle 'remove' command.

    Returns:
        Confirmation, or an error if the id matches no tracked file
    """
    tracked = client.get(cmd.file_id)
    if tracked is None:
        return f"Error: No tracked file matches ID '{cmd.file_id}'"

    await client.remove(tracked)
    return f"Removed {tracked.name} (ID: {tracked.file_id[:8]}...)"


async def handle_save(cmd: SaveCommand, client: Client, base_dir: Optional[Path] = None) -> str:
    """
    Handle 'save' command.

    Args:
        cmd: SaveCommand with file id and optional output path
        client: Client tracking downloads
        base_dir: Downloads directory (tests point it at a temp dir)

    Returns:
        Success message with the written path, or an error
    """
    tracked = client.get(cmd.file_id)
    if tracked is None:
        return f"Error: No tracked file matches ID '{cmd.file_id}'"
    if tracked.status != FileStatus.COMPLETE:
        return f"Error: {tracked.name} is not complete (status: {tracked.status.value})"

    output_file, error = normalize_output_path(cmd.output_path or "", tracked.name, base_dir)
    if error:
        return f"Error: {error}"

    try:
        data = await tracked.read()
        await asyncio.to_thread(_write_output, output_file, data)
    except (KeyError, OSError) as e:
        logger.error(f"Saving {tracked.name} failed: {e}", exc_info=True)
        return f"Error writing file: {e}"

    logger.info(f"Saved {tracked.name} to {output_file}")
    return f"Saved: {tracked.name} ({format_file_size(len(data))})\nSaved to: {output_file}"
