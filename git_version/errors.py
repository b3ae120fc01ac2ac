"""Exception types raised by git-version.

Everything derives from GitVersionError so the CLI can turn any failure
that happens before the interactive session into a single clean exit.
"""

from __future__ import annotations

from pathlib import Path


class GitVersionError(Exception):
    """Base class for all git-version failures."""


class NotARepositoryError(GitVersionError):
    """The given path is not inside a git repository."""

    def __init__(self, path: Path | str, detail: str = "") -> None:
        self.path = Path(path)
        msg = f"not a git repository: {self.path}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class HeadUnavailableError(GitVersionError):
    """HEAD does not point at a commit (e.g. an unborn branch)."""


class RepositoryError(GitVersionError):
    """A git command failed while reading the repository."""


class VersionParseError(GitVersionError, ValueError):
    """A version-shaped tag name has a segment that is not an integer.

    Attributes:
        tag: The offending tag name.
        field: Which field failed ("major", "minor", "patch"), or None when
               the whole name was rejected.
    """

    def __init__(self, tag: str, field: str | None, reason: str) -> None:
        self.tag = tag
        self.field = field
        if field:
            msg = f"error parsing {field} version of tag {tag!r}: {reason}"
        else:
            msg = f"error parsing tag {tag!r}: {reason}"
        super().__init__(msg)


class NotAVersionTagError(VersionParseError):
    """The tag name does not have the v<major>.<minor>.<patch> shape at all."""

    def __init__(self, tag: str) -> None:
        super().__init__(tag, None, "expected three dot-separated segments")


class TagExistsError(GitVersionError):
    """A tag with the requested name is already present."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"tag {name} already exists")


class TagCreationError(GitVersionError):
    """The backend refused to write the tag."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        super().__init__(f"could not create tag {name}: {reason}")


class ConfigError(GitVersionError):
    """The [tool.git-version] table is invalid."""
