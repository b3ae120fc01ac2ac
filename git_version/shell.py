"""Git subprocess wrapper.

Every git invocation goes through git() so commands can be logged in one
place and replaced with a mock in tests.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def git(*args: str, cwd: Path | None = None, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "tag", "-a", "v1.0.0").
        cwd: Directory to run in. Defaults to the process working directory.
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail (e.g., tag lookup).

    Returns:
        Stripped stdout from the git command.

    Raises:
        subprocess.CalledProcessError: On non-zero exit when check is True.
            stderr is captured on the exception.
        OSError: If git is not installed or cwd does not exist.
    """
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd or ".")
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=check
    )
    return result.stdout.strip()
