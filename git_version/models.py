"""Data models for git-version.

These Pydantic models represent the values that flow from tag discovery,
through the bump computation, to the interactive tagging session.
"""

from __future__ import annotations

from enum import Enum

import semver
from pydantic import BaseModel, ConfigDict, Field

TAG_PREFIX = "v"


class BumpKind(str, Enum):
    """Which version field to increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    def __str__(self) -> str:
        return self.value


class Version(BaseModel):
    """A release version as carried by a tag name.

    The canonical form is ``v<major>.<minor>.<patch>`` with ``-<label>``
    appended when the label is non-empty. Instances are immutable; bumping
    produces a new Version.

    Attributes:
        major: Major version number.
        minor: Minor version number.
        patch: Patch version number.
        label: Opaque pre-release label, or "" for none.
    """

    model_config = ConfigDict(frozen=True)

    major: int = Field(default=0, ge=0)
    minor: int = Field(default=0, ge=0)
    patch: int = Field(default=0, ge=0)
    label: str = ""

    def __str__(self) -> str:
        base = f"{TAG_PREFIX}{self.major}.{self.minor}.{self.patch}"
        if self.label:
            return f"{base}-{self.label}"
        return base

    @property
    def triple(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def compare(self, other: Version) -> int:
        """Compare numeric triples only; the label never takes part.

        Returns -1, 0 or 1.
        """
        if self.triple > other.triple:
            return 1
        if self.triple < other.triple:
            return -1
        return 0

    def is_greater_than(self, other: Version) -> bool:
        return self.compare(other) > 0

    def to_semver(self) -> semver.Version:
        return semver.Version(
            self.major, self.minor, self.patch, prerelease=self.label or None
        )

    def supersedes(self, other: Version) -> bool:
        """Whether this version should replace `other` as the latest release.

        Numerically greater always wins. On an equal triple the label is
        ranked with semver pre-release precedence, so ``v1.2.3`` beats
        ``v1.2.3-rc1`` no matter which one is seen first. Labels that semver
        ranks equal (``1`` and ``01``) fall back to plain string order.
        """
        cmp = self.compare(other)
        if cmp:
            return cmp > 0
        cmp = self.to_semver().compare(other.to_semver())
        if cmp:
            return cmp > 0
        return self.label > other.label


class BumpRequest(BaseModel):
    """The bump asked for on the command line.

    Labels are limited to semver identifier characters: a dot would change
    the number of dot-separated segments in the tag name and the tag would
    no longer be recognised as a version.
    """

    kind: BumpKind
    label: str = Field(default="", pattern=r"^[0-9A-Za-z-]*$")


class TagRef(BaseModel):
    """A tag reference as read from the repository.

    Attributes:
        name: Tag name. For annotated tags this is the name recorded in the
              tag object, otherwise the ref name.
        annotated: True when the ref points at a tag object.
        message: Tag message (annotated tags only).
    """

    name: str
    annotated: bool
    message: str = ""
