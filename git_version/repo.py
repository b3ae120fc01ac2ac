"""Repository handle: tag discovery, HEAD access and tag creation.

A Repository is opened once per invocation and passed explicitly to the
code that needs it. It is read for version resolution and written exactly
once, when the tag is created.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterator
from pathlib import Path

from .errors import (
    HeadUnavailableError,
    NotARepositoryError,
    RepositoryError,
    TagCreationError,
    TagExistsError,
)
from .models import TagRef, Version
from .shell import git

logger = logging.getLogger(__name__)

# for-each-ref fields are separated by US (0x1f), records end with RS (0x1e)
# so that multi-line tag messages survive the round trip.
FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"
TAG_FORMAT = "%1f".join(
    ["%(objecttype)", "%(refname:strip=2)", "%(tag)", "%(contents)"]
) + "%1e"


def _stderr(exc: subprocess.CalledProcessError) -> str:
    return (exc.stderr or "").strip() or str(exc)


class Repository:
    """A git repository on disk.

    Attributes:
        path: The directory the repository was opened from.
        root: Work tree top level, or `path` for bare repositories.
        git_dir: Absolute path of the .git directory.
    """

    def __init__(self, path: Path, root: Path, git_dir: Path) -> None:
        self.path = path
        self.root = root
        self.git_dir = git_dir

    def __repr__(self) -> str:
        return f"Repository({str(self.root)!r})"

    @classmethod
    def open(cls, path: Path | str) -> Repository:
        """Open the repository containing `path`.

        Raises:
            NotARepositoryError: `path` is missing, is not inside a git
                repository, or git itself is unavailable.
        """
        path = Path(path).resolve()
        try:
            git_dir = git("rev-parse", "--absolute-git-dir", cwd=path)
        except subprocess.CalledProcessError as exc:
            raise NotARepositoryError(path, _stderr(exc)) from exc
        except OSError as exc:
            raise NotARepositoryError(path, str(exc)) from exc
        toplevel = git("rev-parse", "--show-toplevel", cwd=path, check=False)
        root = Path(toplevel) if toplevel else path
        logger.debug("opened repository %s (git dir %s)", root, git_dir)
        return cls(path=path, root=root, git_dir=Path(git_dir))

    def git(self, *args: str, check: bool = True) -> str:
        return git(*args, cwd=self.path, check=check)

    def tags(self) -> Iterator[TagRef]:
        """Yield every tag reference in the repository.

        Raises:
            RepositoryError: Tag enumeration failed.
        """
        try:
            output = self.git("for-each-ref", f"--format={TAG_FORMAT}", "refs/tags")
        except subprocess.CalledProcessError as exc:
            raise RepositoryError(f"error listing tags: {_stderr(exc)}") from exc

        for record in output.split(RECORD_SEP):
            record = record.lstrip("\n")
            if not record:
                continue
            objecttype, refname, tagname, contents = record.split(FIELD_SEP, 3)
            annotated = objecttype == "tag"
            yield TagRef(
                name=tagname if annotated and tagname else refname,
                annotated=annotated,
                message=contents if annotated else "",
            )

    def head(self) -> str:
        """Return the commit hash HEAD points at.

        Raises:
            HeadUnavailableError: HEAD does not resolve to a commit.
        """
        try:
            return self.git("rev-parse", "--verify", "HEAD^{commit}")
        except subprocess.CalledProcessError as exc:
            raise HeadUnavailableError(f"error reading HEAD: {_stderr(exc)}") from exc

    def head_message(self) -> str:
        """Return the message of the HEAD commit."""
        try:
            return self.git("log", "-1", "--format=%B", self.head())
        except subprocess.CalledProcessError as exc:
            raise HeadUnavailableError(
                f"error reading latest commit message: {_stderr(exc)}"
            ) from exc

    def tag_exists(self, name: str) -> bool:
        return bool(self.git("rev-parse", "-q", "--verify", f"refs/tags/{name}", check=False))

    def create_tag(self, version: Version, message: str) -> str:
        """Create an annotated tag for `version` at HEAD.

        Returns:
            The tag name.

        Raises:
            TagCreationError: The message is empty or git refused the write.
            TagExistsError: A tag with the same name already exists.
            HeadUnavailableError: HEAD does not resolve to a commit.
        """
        name = str(version)
        if not message:
            raise TagCreationError(name, "an annotation message is required")
        if self.tag_exists(name):
            raise TagExistsError(name)
        target = self.head()
        try:
            self.git("tag", "-a", name, "-m", message, target)
        except subprocess.CalledProcessError as exc:
            raise TagCreationError(name, _stderr(exc)) from exc
        logger.info("created tag %s at %s", name, target[:12])
        return name
