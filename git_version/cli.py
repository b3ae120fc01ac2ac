"""CLI entry point for git-version."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import click
from pydantic import ValidationError

from .config import load_config
from .errors import GitVersionError
from .models import BumpKind, BumpRequest
from .repo import Repository
from .session import AnnotationSession
from .terminal import run_session
from .versions import bump_version, resolve_latest_version

LOG_LEVEL_ENV = "GIT_VERSION_LOG_LEVEL"

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    # GIT_VERSION_LOG_LEVEL wins over --verbose
    log_level = os.getenv(LOG_LEVEL_ENV, "INFO" if verbose else "WARNING")
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(name)s: %(message)s",
    )


@click.group(no_args_is_help=False)
@click.version_option(package_name="git-version")
@click.option("-v", "--verbose", is_flag=True, help="Log progress to stderr.")
def cli(verbose: bool) -> None:
    """Commands for managing version tags in a git repository."""
    _configure_logging(verbose)


def _is_interactive() -> bool:
    return click.get_text_stream("stdin").isatty()


def bump(kind: BumpKind, path: Path, label: str) -> None:
    """Resolve the latest version, bump it and run the tagging session."""
    try:
        request = BumpRequest(kind=kind, label=label)
    except ValidationError as exc:
        raise click.BadParameter(
            "may only contain letters, digits and hyphens", param_hint="'--label'"
        ) from exc

    try:
        repo = Repository.open(path)
        config = load_config(repo.root)
        if request.label and request.kind not in config.label_kinds:
            allowed = ", ".join(str(k) for k in config.label_kinds) or "none"
            raise click.UsageError(
                f"--label is not accepted for {request.kind} bumps "
                f"(label-bumps: {allowed})"
            )
        current = resolve_latest_version(repo.tags())
        proposed = bump_version(
            current, request.kind, request.label, label_kinds=config.label_kinds
        )
        placeholder = repo.head_message()
    except GitVersionError as exc:
        raise click.ClickException(str(exc)) from exc
    logger.info("%s bump: %s → %s", request.kind, current, proposed)

    if not _is_interactive():
        raise click.ClickException("an interactive terminal is required")

    session = AnnotationSession(
        current_version=current,
        proposed_version=proposed,
        placeholder=placeholder,
        create_tag=repo.create_tag,
        char_limit=config.char_limit,
    )
    run_session(session)


def _bump_command(kind: BumpKind, short_help: str, help_text: str) -> click.Command:
    @click.option(
        "-p",
        "--path",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        default=Path.cwd,
        show_default="current directory",
        help="Path to the git repository.",
    )
    @click.option(
        "-l",
        "--label",
        default="",
        help="Label appended to the new version (e.g. rc1).",
    )
    def command(path: Path, label: str) -> None:
        bump(kind, path, label)

    command.__doc__ = help_text
    return cli.command(name=str(kind), short_help=short_help)(command)


patch = _bump_command(
    BumpKind.PATCH,
    "Increment the last version number",
    "Create a new tag with the last version number incremented by 1.",
)
minor = _bump_command(
    BumpKind.MINOR,
    "Increment the middle/minor version number",
    "Create a new tag with the middle/minor version number incremented by 1\n"
    "and the last version number reset to 0.",
)
major = _bump_command(
    BumpKind.MAJOR,
    "Increment the first/major version number",
    "Create a new tag with the first/major version number incremented by 1\n"
    "and the rest of the version numbers reset to 0.",
)
