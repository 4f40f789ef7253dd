"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["add", "list", "status", "remove", "save", "clear", "exit", "help"]

# Commands whose argument is a tracked file id
FILE_ID_COMMANDS = ("remove", "save")

STYLE = Style.from_dict(
    {
        "prompt": "#2683ff bold",
        "command": "#0088ff bold",
    }
)

BLUE = "\033[38;2;38;131;255m"
GREEN = "\033[32m"
RED = "\033[31m"
RESET = "\033[0m"

DOWNLOADS_DIR = "downloads"

LOGO = f"""{BLUE}
 _          _     _             __      _       _
| |__  _ __(_) __| | __ _  ___ / _| ___| |_ ___| |__
| '_ \\| '__| |/ _` |/ _` |/ _ \\ |_ / _ \\ __/ __| '_ \\
| |_) | |  | | (_| | (_| |  __/  _|  __/ || (__| | | |
|_.__/|_|  |_|\\__,_|\\__, |\\___|_|  \\___|\\__\\___|_| |_|
                    |___/
{RESET}"""

WELCOME_TITLE = "bridgefetch - download files from the storage network"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "bridgefetch> "

HELP_TEXT = """Available commands:
  add <bucket_id> <file>               Download a file from a bucket by id
  add <user> <bucket_name> <file>      Download a file from a user's named bucket
  list                                 List tracked files with status and progress
  status                               Show overall progress and download speed
  remove <file_id>                     Cancel a download and delete its data
  save <file_id> [output_path]         Write a completed file (output uses downloads/ prefix)
  clear                                Clear screen and redisplay welcome message
  help                                 Show this help
  exit                                 Destroy the client and exit

File ids may be abbreviated to any unique prefix.
Examples:
  add 0d3f4e1a9b2c7d8e6f5a4b3c report.pdf
  add alice@example.com photos cat.jpg
  list
  save 3fa2 downloads/cat.jpg
  remove 3fa2"""
