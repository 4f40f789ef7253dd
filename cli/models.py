"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class AddCommand:
    """Start downloading a file."""

    file_name: str
    bucket_id: str | None = None
    user: str | None = None
    bucket_name: str | None = None
    command: Literal["add"] = "add"


@dataclass(frozen=True)
class ListCommand:
    """List tracked files."""

    command: Literal["list"] = "list"


@dataclass(frozen=True)
class StatusCommand:
    """Show aggregate progress and speed."""

    command: Literal["status"] = "status"


@dataclass(frozen=True)
class RemoveCommand:
    """Cancel and discard a tracked file."""

    file_id: str
    command: Literal["remove"] = "remove"


@dataclass(frozen=True)
class SaveCommand:
    """Write a completed file to disk."""

    file_id: str
    output_path: str | None = None
    command: Literal["save"] = "save"


CommandRequest = (
    AddCommand
    | ListCommand
    | StatusCommand
    | RemoveCommand
    | SaveCommand
)
