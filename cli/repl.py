"""Async REPL with prompt_toolkit for user interaction."""

import os
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout

from client import Client, TrackedFile
from cli.commands import (
    handle_add,
    handle_list,
    handle_remove,
    handle_save,
    handle_status,
)
from cli.completer import BridgeFetchCompleter
from cli.constants import (
    GREEN,
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    RED,
    RESET,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.models import (
    AddCommand,
    ListCommand,
    RemoveCommand,
    SaveCommand,
    StatusCommand,
)
from cli.parser import ParseError, parse_command
from cli.utils import format_file_size
from common.exceptions import DownloadError


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    if sys.platform == "win32":
        os.system("cls")
    else:
        os.system("clear")


def show_welcome() -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


async def dispatch_command(cmd_obj, client: Client) -> str:
    """Dispatch parsed command to appropriate handler."""
    if isinstance(cmd_obj, AddCommand):
        return await handle_add(cmd_obj, client)
    elif isinstance(cmd_obj, ListCommand):
        return await handle_list(cmd_obj, client)
    elif isinstance(cmd_obj, StatusCommand):
        return await handle_status(cmd_obj, client)
    elif isinstance(cmd_obj, RemoveCommand):
        return await handle_remove(cmd_obj, client)
    elif isinstance(cmd_obj, SaveCommand):
        return await handle_save(cmd_obj, client)
    else:
        return f"Unknown command type: {type(cmd_obj)}"


def attach_printers(client: Client) -> None:
    """Print download lifecycle events as they happen."""

    def on_file(tracked: TrackedFile) -> None:
        print(f"Started {tracked.name} ({format_file_size(tracked.total_bytes)}, ID: {tracked.file_id[:8]}...)")

    def on_done(tracked: TrackedFile) -> None:
        print(f"{GREEN}Completed{RESET} {tracked.name} (ID: {tracked.file_id[:8]}...)")

    def on_error(err: DownloadError) -> None:
        file_id = (err.file_id or "")[:8]
        print(f"{RED}Failed{RESET} (ID: {file_id}...): {err}")

    client.on('file', on_file)
    client.on('done', on_done)
    client.on('error', on_error)


async def repl_loop(client: Client) -> None:
    """Run the interactive REPL until exit, then destroy the client."""
    completer = BridgeFetchCompleter(lambda: client.files)
    history = InMemoryHistory()
    session: PromptSession = PromptSession(
        completer=completer, history=history, style=STYLE
    )

    attach_printers(client)
    clear_screen()
    show_welcome()

    try:
        with patch_stdout():
            while True:
                try:
                    user_input = await session.prompt_async([("class:prompt", PROMPT_TEXT)])

                    if not user_input.strip():
                        continue

                    if user_input.strip() == "exit":
                        print("Goodbye!")
                        break

                    if user_input.strip() == "help":
                        print(HELP_TEXT)
                        continue

                    if user_input.strip() == "clear":
                        clear_screen()
                        show_welcome()
                        continue

                    cmd_obj = parse_command(user_input)
                    result = await dispatch_command(cmd_obj, client)
                    print(result)

                except ParseError as e:
                    print(f"Error: {e}")
                except KeyboardInterrupt:
                    continue
                except EOFError:
                    print("\nGoodbye!")
                    break
    finally:
        await client.destroy()
