"""Project settings read from pyproject.toml.

Settings live in an optional ``[tool.git-version]`` table at the repository
root::

    [tool.git-version]
    label-bumps = ["patch", "minor"]
    char-limit = 200

Every key is optional; a missing file or table means defaults.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError
import tomlkit
from tomlkit.exceptions import ParseError as TOMLParseError

from .errors import ConfigError
from .models import BumpKind

logger = logging.getLogger(__name__)

PYPROJECT = "pyproject.toml"
TABLE = "git-version"


class GitVersionConfig(BaseModel):
    """Validated ``[tool.git-version]`` settings.

    Attributes:
        label_kinds: Bump kinds that accept --label (key ``label-bumps``).
        char_limit: Maximum annotation length in the interactive prompt.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    label_kinds: tuple[BumpKind, ...] = Field(
        default=(BumpKind.PATCH,), alias="label-bumps"
    )
    char_limit: int = Field(default=156, alias="char-limit", gt=0)


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file."""
    return tomlkit.parse(path.read_text())


def get_tool_table(doc: tomlkit.TOMLDocument) -> dict:
    """Extract [tool.git-version] as plain Python values ({} if absent)."""
    tool = doc.unwrap().get("tool", {})
    if not isinstance(tool, dict):
        raise ConfigError("[tool] must be a table")
    table = tool.get(TABLE, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[tool.{TABLE}] must be a table")
    return table


def load_config(root: Path) -> GitVersionConfig:
    """Load settings from `root`/pyproject.toml.

    Raises:
        ConfigError: The file cannot be parsed or the table is invalid.
    """
    path = root / PYPROJECT
    if not path.is_file():
        return GitVersionConfig()
    try:
        table = get_tool_table(load_pyproject(path))
    except TOMLParseError as exc:
        raise ConfigError(f"invalid {path}: {exc}") from exc
    try:
        config = GitVersionConfig.model_validate(table)
    except ValidationError as exc:
        raise ConfigError(f"invalid [tool.{TABLE}] in {path}:\n{exc}") from exc
    logger.debug("loaded config from %s: %s", path, config)
    return config
