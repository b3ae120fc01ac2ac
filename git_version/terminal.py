"""Terminal input loop for the annotation session.

Keys are read one at a time with click.getchar() and translated into
session Key events. Frames are drawn in place with rich.live.Live, which
knows how many screen rows the previous frame took, wrapped lines included.
"""

from __future__ import annotations

from collections.abc import Callable

import click
from rich.console import Console
from rich.live import Live
from rich.text import Text

from .session import AnnotationSession, Key, SessionState

# Raw sequences as returned by click.getchar(). POSIX terminals send ANSI
# escape sequences; Windows sends a \xe0 or \x00 prefix plus a scan code.
KEY_NAMES: dict[str, str] = {
    "\r": "enter",
    "\n": "enter",
    "\x1b": "esc",
    "\x03": "ctrl+c",
    "\x04": "ctrl+d",
    "\x01": "ctrl+a",
    "\x05": "ctrl+e",
    "\x0b": "ctrl+k",
    "\x15": "ctrl+u",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1b[1~": "home",
    "\x1b[4~": "end",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[3~": "delete",
}
for _prefix in ("\xe0", "\x00"):
    KEY_NAMES.update(
        {
            f"{_prefix}H": "up",
            f"{_prefix}P": "down",
            f"{_prefix}M": "right",
            f"{_prefix}K": "left",
            f"{_prefix}G": "home",
            f"{_prefix}O": "end",
            f"{_prefix}S": "delete",
        }
    )


def key_from_input(raw: str) -> Key:
    """Translate raw getchar() output into a Key.

    Unknown escape sequences become Key("unknown"); anything else is typed
    text (a paste can deliver several characters at once).
    """
    name = KEY_NAMES.get(raw)
    if name:
        return Key(name)
    if raw.startswith(("\x1b", "\xe0", "\x00")) or not raw.isprintable():
        return Key("unknown")
    return Key.typed(raw)


def read_key() -> Key:
    """Block until a key is pressed and return it."""
    try:
        return key_from_input(click.getchar())
    except KeyboardInterrupt:
        return Key("ctrl+c")
    except EOFError:
        return Key("ctrl+d")


def _frame(session: AnnotationSession) -> Text:
    return Text.from_ansi(session.render())


def run_session(
    session: AnnotationSession,
    read: Callable[[], Key] = read_key,
    console: Console | None = None,
) -> SessionState:
    """Drive `session` until it reaches a terminal state.

    One key is read and applied per iteration. The frame is redrawn in place
    after every key, and the final frame stays on screen.
    """
    with Live(
        _frame(session), console=console or Console(), auto_refresh=False
    ) as live:
        while not session.done:
            session.handle_key(read())
            live.update(_frame(session), refresh=True)
    return session.state
