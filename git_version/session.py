"""Interactive annotation session.

The session shows the current and proposed versions, collects an annotation
message and creates the tag when the operator confirms. It is a plain state
machine: feed it one Key at a time with handle_key() and draw render()
between keys. Reading keys from the terminal lives in terminal.py.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import NamedTuple

import click

from .errors import GitVersionError
from .models import Version

logger = logging.getLogger(__name__)

TEXT = "text"
CANCEL_KEYS = frozenset({"ctrl+c", "ctrl+d", "esc"})
CONFIRM_KEY = "enter"
AUTOFILL_KEY = "right"

CHECK_MARK = click.style("✓", fg=42)
CROSS_MARK = click.style("✗", fg="red")


class Key(NamedTuple):
    """A single input event.

    Named keys ("enter", "left", "ctrl+c", ...) carry only a name. Typed or
    pasted characters arrive as Key("text", "<chars>").
    """

    name: str
    text: str = ""

    @classmethod
    def typed(cls, text: str) -> Key:
        return cls(TEXT, text)


class SessionState(str, Enum):
    EDITING = "editing"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class TextInput:
    """Single-line text editor with a cursor and a character limit.

    view() shows at most `width` characters, scrolled to keep the cursor
    visible.
    """

    def __init__(
        self, placeholder: str = "", char_limit: int = 156, width: int = 40
    ) -> None:
        self.placeholder = placeholder
        self.char_limit = char_limit
        self.width = width
        self.value = ""
        self.cursor = 0

    def set_value(self, text: str) -> None:
        self.value = text[: self.char_limit]
        self.cursor = len(self.value)

    def insert(self, text: str) -> None:
        room = self.char_limit - len(self.value)
        text = "".join(ch for ch in text if ch.isprintable())[:room]
        if not text:
            return
        self.value = self.value[: self.cursor] + text + self.value[self.cursor :]
        self.cursor += len(text)

    def handle_key(self, key: Key) -> None:
        """Apply an editing key. Unknown keys are ignored."""
        if key.name == TEXT:
            self.insert(key.text)
        elif key.name == "left":
            self.cursor = max(0, self.cursor - 1)
        elif key.name == "right":
            self.cursor = min(len(self.value), self.cursor + 1)
        elif key.name in ("home", "ctrl+a"):
            self.cursor = 0
        elif key.name in ("end", "ctrl+e"):
            self.cursor = len(self.value)
        elif key.name == "backspace":
            if self.cursor:
                self.value = self.value[: self.cursor - 1] + self.value[self.cursor :]
                self.cursor -= 1
        elif key.name == "delete":
            self.value = self.value[: self.cursor] + self.value[self.cursor + 1 :]
        elif key.name == "ctrl+u":
            self.value = self.value[self.cursor :]
            self.cursor = 0
        elif key.name == "ctrl+k":
            self.value = self.value[: self.cursor]

    def view(self) -> str:
        prompt = "> "
        if not self.value:
            hint = self.placeholder.strip().split("\n", 1)[0][: self.width]
            if not hint:
                return prompt + click.style(" ", reverse=True)
            head, rest = hint[0], hint[1:]
            return prompt + click.style(head, reverse=True) + click.style(rest, dim=True)
        offset = max(0, self.cursor - self.width + 1)
        shown = self.value[offset : offset + self.width].replace("\n", " ")
        pos = self.cursor - offset
        at = shown[pos : pos + 1] or " "
        return prompt + shown[:pos] + click.style(at, reverse=True) + shown[pos + 1 :]


class AnnotationSession:
    """Collects a tag annotation and creates the tag on confirmation.

    States: EDITING → CONFIRMED | CANCELLED | FAILED. Keys received after
    the session has ended are ignored.

    Args:
        current_version: Latest version found in the repository.
        proposed_version: Version the new tag will carry.
        placeholder: Last commit message, offered via the autofill key.
        create_tag: Called as create_tag(proposed_version, annotation) on
            confirmation. GitVersionError from it ends the session in FAILED.
        char_limit: Maximum annotation length.
    """

    def __init__(
        self,
        current_version: Version,
        proposed_version: Version,
        placeholder: str,
        create_tag: Callable[[Version, str], object],
        char_limit: int = 156,
    ) -> None:
        self.current_version = current_version
        self.proposed_version = proposed_version
        self.placeholder = placeholder
        self.create_tag = create_tag
        self.input = TextInput(placeholder=placeholder, char_limit=char_limit)
        self.state = SessionState.EDITING
        self.error: GitVersionError | None = None

    @property
    def annotation(self) -> str:
        return self.input.value

    @property
    def finished(self) -> bool:
        """True once the tag has been created."""
        return self.state is SessionState.CONFIRMED

    @property
    def done(self) -> bool:
        return self.state is not SessionState.EDITING

    def handle_key(self, key: Key) -> SessionState:
        if self.done:
            return self.state

        if key.name in CANCEL_KEYS:
            logger.debug("session cancelled")
            self.state = SessionState.CANCELLED
        elif key.name == CONFIRM_KEY:
            self._confirm()
        elif key.name == AUTOFILL_KEY and not self.input.value:
            self.input.set_value(self.placeholder)
        else:
            self.input.handle_key(key)
        return self.state

    def _confirm(self) -> None:
        try:
            self.create_tag(self.proposed_version, self.annotation)
        except GitVersionError as exc:
            logger.debug("tag creation failed: %s", exc)
            self.error = exc
            self.state = SessionState.FAILED
        else:
            self.state = SessionState.CONFIRMED

    def render(self) -> str:
        if self.state is SessionState.CONFIRMED:
            return _margin(f"{CHECK_MARK} Updated version to {self.proposed_version}")
        if self.state is SessionState.FAILED:
            return _margin(
                f"{CROSS_MARK} Failed to create tag {self.proposed_version}: {self.error}"
            )
        if self.state is SessionState.CANCELLED:
            return "Cancelled, no tag created."
        return (
            f"Current Version: {self.current_version}\n"
            f"New Version: {self.proposed_version}\n"
            "\n"
            "Please supply an annotation\n"
            f"{self.input.view()}"
        )


def _margin(text: str) -> str:
    return f"\n  {text}\n"
