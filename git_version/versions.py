"""Version parsing, bumping and latest-version resolution.

Tag names are read as ``v<major>.<minor>.<patch>[-<label>]``. Names with any
other number of dot-separated segments are not version tags and are ignored,
but a version-shaped annotated tag with a non-numeric field is treated as a
broken release history and aborts resolution.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Collection, Iterable

import semver

from .errors import NotAVersionTagError, VersionParseError
from .models import TAG_PREFIX, BumpKind, TagRef, Version

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"[0-9]+")


def is_version_shaped(name: str) -> bool:
    """True if the name splits into exactly three dot-separated segments."""
    return len(name.split(".")) == 3


def _parse_int(tag: str, field: str, text: str) -> int:
    if not _DIGITS.fullmatch(text):
        raise VersionParseError(tag, field, f"{text!r} is not a non-negative integer")
    return int(text)


def parse_version(name: str) -> Version:
    """Parse a tag name into a Version.

    The patch segment is split on its first "-": everything after it is the
    label, so "v2.1.0-rc-1" has label "rc-1". A leading "v" on the major
    segment is optional.

    Examples:
        "v1.2.3" → Version(1, 2, 3)
        "v2.1.0-rc1" → Version(2, 1, 0, "rc1")

    Raises:
        NotAVersionTagError: The name does not have three dot-segments.
        VersionParseError: A numeric field is not a non-negative integer.
    """
    parts = name.split(".")
    if len(parts) != 3:
        raise NotAVersionTagError(name)
    major_text, minor_text, patch_segment = parts
    if major_text.startswith(TAG_PREFIX):
        major_text = major_text[len(TAG_PREFIX) :]
    patch_text, _, label = patch_segment.partition("-")
    return Version(
        major=_parse_int(name, "major", major_text),
        minor=_parse_int(name, "minor", minor_text),
        patch=_parse_int(name, "patch", patch_text),
        label=label,
    )


def format_version(version: Version) -> str:
    """Render a Version as a tag name (inverse of parse_version)."""
    return str(version)


def bump_version(
    current: Version,
    kind: BumpKind,
    label: str = "",
    *,
    label_kinds: Collection[BumpKind] = (BumpKind.PATCH,),
) -> Version:
    """Compute the version that follows `current`.

    Lower-order fields reset to zero. The label is only carried onto the new
    version for bump kinds listed in `label_kinds`; by default only patch
    bumps keep it.

    Examples:
        v1.2.3 + patch → v1.2.4
        v1.2.3 + minor → v1.3.0
        v1.2.3 + major → v2.0.0
    """
    base = semver.Version(current.major, current.minor, current.patch)
    if kind is BumpKind.MAJOR:
        bumped = base.bump_major()
    elif kind is BumpKind.MINOR:
        bumped = base.bump_minor()
    else:
        bumped = base.bump_patch()
    return Version(
        major=bumped.major,
        minor=bumped.minor,
        patch=bumped.patch,
        label=label if kind in label_kinds else "",
    )


def resolve_latest_version(tags: Iterable[TagRef]) -> Version:
    """Find the highest version among annotated version tags.

    Lightweight tags and annotated tags that are not version-shaped are
    skipped. Returns v0.0.0 when nothing qualifies.

    Raises:
        VersionParseError: An annotated, version-shaped tag is malformed.
            Resolution stops at the first such tag.
    """
    latest = Version()
    for tag in tags:
        if not tag.annotated:
            logger.debug("skipping lightweight tag %s", tag.name)
            continue
        if not is_version_shaped(tag.name):
            logger.debug("skipping non-version tag %s", tag.name)
            continue
        version = parse_version(tag.name)
        if version.supersedes(latest):
            latest = version
    logger.debug("latest version is %s", latest)
    return latest
