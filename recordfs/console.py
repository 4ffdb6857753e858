"""Console helpers for small command-line tools."""

from typing import Optional

import click
from rich.console import Console

from recordfs.common.constants import ARGUMENT_QUOTE, PRESS_ANY_KEY_MESSAGE

console = Console()

# None = follow RecordFSSettings().debug (RECORDFS_DEBUG)
_debug_enabled: Optional[bool] = None


def press_any_key_to_continue() -> None:
    """Ask the user to press any key and wait for it."""
    console.print(PRESS_ANY_KEY_MESSAGE, markup=False, highlight=False)
    click.getchar()


def _trim_single(value: str, char: str) -> str:
    """Remove at most one *char* from each end of *value*."""
    if value.startswith(char):
        value = value[1:]
    if value.endswith(char):
        value = value[:-1]
    return value


def get_or_read_argument(index: int, *args: str, read_message: Optional[str] = None) -> str:
    """Return ``args[index]``, prompting for it on the console when absent.

    The value is stripped of surrounding whitespace and of one pair of
    enclosing double quotes, so pasted paths like ``"C:\\My Files"`` work.

    Args:
        index: Position of the argument in *args*
        args: Arguments passed to the program
        read_message: Prompt text; defaults to ``"<index + 1> argument"``

    Returns:
        The cleaned value, or ``""`` when nothing was provided
    """
    if 0 <= index < len(args):
        result: Optional[str] = args[index]
    else:
        if read_message is None:
            read_message = f"{index + 1} argument"
        try:
            result = console.input(f"{read_message}: ", markup=False)
        except EOFError:
            result = None
    if not result:
        return ""
    return _trim_single(result.strip(), ARGUMENT_QUOTE).strip()


def set_debug(enabled: Optional[bool]) -> None:
    """Force debug output on or off; ``None`` returns control to settings."""
    global _debug_enabled
    _debug_enabled = enabled


def is_debug_enabled() -> bool:
    if _debug_enabled is not None:
        return _debug_enabled
    from recordfs.config import RecordFSSettings

    return RecordFSSettings().debug


def debug(message: str, *args: object) -> None:
    """Print *message* when debug output is enabled.

    Extra *args* are substituted with :meth:`str.format`.
    """
    if not is_debug_enabled():
        return
    console.print(message.format(*args) if args else message, markup=False, highlight=False)
