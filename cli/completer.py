"""Custom completer for the bridgefetch CLI with file id autocompletion."""

from typing import Callable, Iterable, List

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from client import TrackedFile
from cli.constants import COMMANDS, FILE_ID_COMMANDS


class BridgeFetchCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Tracked file id completion for 'remove' and 'save'
    """

    def __init__(self, files_provider: Callable[[], List[TrackedFile]]):
        """
        Args:
            files_provider: Returns the currently tracked files
        """
        self._files_provider = files_provider

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        command = tokens[0].lower()
        if command not in FILE_ID_COMMANDS:
            return

        argument_index = len(tokens) if is_typing_new_token else len(tokens) - 1
        if argument_index != 1:
            return

        current_word = "" if is_typing_new_token else tokens[-1]
        yield from self._complete_file_ids(current_word)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_file_ids(self, partial: str) -> Iterable[Completion]:
        """Complete ids of tracked files, showing the file name alongside."""
        files = self._files_provider()

        if not files:
            yield Completion(
                "",
                start_position=0,
                display="(no tracked files)",
            )
            return

        for tracked in files:
            if tracked.file_id.startswith(partial):
                yield Completion(
                    tracked.file_id,
                    start_position=-len(partial),
                    display=f"{tracked.file_id[:8]} {tracked.name}",
                )
