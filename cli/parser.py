"""Command parser for CLI input."""

import shlex

from cli.models import (
    AddCommand,
    CommandRequest,
    ListCommand,
    RemoveCommand,
    SaveCommand,
    StatusCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of Add/List/Status/Remove/Save)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "add":
        return _parse_add(tokens[1:])
    elif command_name == "list":
        return _parse_no_args(tokens[1:], "list", ListCommand)
    elif command_name == "status":
        return _parse_no_args(tokens[1:], "status", StatusCommand)
    elif command_name == "remove":
        return _parse_remove(tokens[1:])
    elif command_name == "save":
        return _parse_save(tokens[1:])
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_add(args: list[str]) -> AddCommand:
    """Parse 'add <bucket_id> <file>' or 'add <user> <bucket_name> <file>'."""
    if len(args) == 2:
        bucket_id, file_name = args
        return AddCommand(file_name=file_name, bucket_id=bucket_id)
    if len(args) == 3:
        user, bucket_name, file_name = args
        return AddCommand(file_name=file_name, user=user, bucket_name=bucket_name)
    raise ParseError("add requires <bucket_id> <file> or <user> <bucket_name> <file>")


def _parse_no_args(args: list[str], name: str, command_cls):
    if args:
        raise ParseError(f"{name} takes no arguments")
    return command_cls()


def _parse_remove(args: list[str]) -> RemoveCommand:
    """Parse 'remove <file_id>' command."""
    if len(args) != 1:
        raise ParseError("remove requires exactly 1 argument: <file_id>")
    return RemoveCommand(file_id=args[0])


def _parse_save(args: list[str]) -> SaveCommand:
    """Parse 'save <file_id> [output_path]' command."""
    if not 1 <= len(args) <= 2:
        raise ParseError("save requires <file_id> [output_path]")

    file_id = args[0]
    output_path = args[1] if len(args) > 1 else None

    return SaveCommand(file_id=file_id, output_path=output_path)
