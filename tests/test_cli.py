"""Tests for git_version.cli."""

from __future__ import annotations

import io
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner
from rich.console import Console

from git_version.cli import cli
from git_version.errors import NotARepositoryError
from git_version.models import TagRef
from git_version.session import AnnotationSession, Key, SessionState
from git_version.terminal import run_session

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def mock_repo(tmp_path: Path) -> MagicMock:
    repo = MagicMock()
    repo.root = tmp_path
    repo.tags.return_value = [
        TagRef(name="v1.2.3", annotated=True, message="release"),
        TagRef(name="nightly", annotated=False),
    ]
    repo.head_message.return_value = "fix: last commit"
    return repo


@pytest.fixture
def open_repo(mock_repo: MagicMock):
    with patch("git_version.cli.Repository") as repository_cls:
        repository_cls.open.return_value = mock_repo
        yield repository_cls


@pytest.fixture
def interactive():
    with patch("git_version.cli._is_interactive", return_value=True):
        yield


@pytest.fixture
def mock_run_session():
    with patch("git_version.cli.run_session") as mocked:
        mocked.return_value = SessionState.CONFIRMED
        yield mocked


def _session(mock_run_session: MagicMock) -> AnnotationSession:
    return mock_run_session.call_args[0][0]


class TestGroup:
    """Tests for the top-level command group."""

    def test_requires_subcommand(self, runner: CliRunner) -> None:
        """Running with no subcommand is a usage error."""
        result = runner.invoke(cli, [])
        assert result.exit_code != 0

    def test_lists_subcommands(self, runner: CliRunner) -> None:
        """--help lists patch, minor and major."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("patch", "minor", "major"):
            assert name in result.output


@pytest.mark.usefixtures("open_repo", "interactive")
class TestBumpCommands:
    """Tests for the patch/minor/major commands."""

    @pytest.mark.parametrize(
        ("command", "expected"),
        [("patch", "v1.2.4"), ("minor", "v1.3.0"), ("major", "v2.0.0")],
    )
    def test_proposes_next_version(
        self,
        runner: CliRunner,
        mock_run_session: MagicMock,
        tmp_path: Path,
        command: str,
        expected: str,
    ) -> None:
        """Each command proposes the bumped version with HEAD's message as placeholder."""
        result = runner.invoke(cli, [command, "-p", str(tmp_path)])

        assert result.exit_code == 0, result.output
        session = _session(mock_run_session)
        assert str(session.current_version) == "v1.2.3"
        assert str(session.proposed_version) == expected
        assert session.placeholder == "fix: last commit"

    def test_opens_given_path(
        self,
        runner: CliRunner,
        open_repo: MagicMock,
        mock_run_session: MagicMock,
        tmp_path: Path,
    ) -> None:
        """--path selects the repository to open."""
        runner.invoke(cli, ["patch", "--path", str(tmp_path)])
        open_repo.open.assert_called_once_with(tmp_path)

    def test_session_creates_tag_through_repository(
        self,
        runner: CliRunner,
        mock_repo: MagicMock,
        mock_run_session: MagicMock,
        tmp_path: Path,
    ) -> None:
        """Confirming the session writes through the opened repository."""
        runner.invoke(cli, ["patch", "-p", str(tmp_path)])
        assert _session(mock_run_session).create_tag == mock_repo.create_tag

    def test_patch_label(
        self, runner: CliRunner, mock_run_session: MagicMock, tmp_path: Path
    ) -> None:
        """--label is appended to a patch bump."""
        result = runner.invoke(cli, ["patch", "-p", str(tmp_path), "-l", "rc1"])

        assert result.exit_code == 0, result.output
        assert str(_session(mock_run_session).proposed_version) == "v1.2.4-rc1"

    def test_label_rejected_for_minor_by_default(
        self, runner: CliRunner, mock_run_session: MagicMock, tmp_path: Path
    ) -> None:
        """Without configuration, only patch bumps take a label."""
        result = runner.invoke(cli, ["minor", "-p", str(tmp_path), "-l", "rc1"])

        assert result.exit_code == 2
        assert "not accepted for minor bumps" in result.output
        mock_run_session.assert_not_called()

    def test_label_allowed_by_config(
        self, runner: CliRunner, mock_run_session: MagicMock, tmp_path: Path
    ) -> None:
        """label-bumps and char-limit from pyproject.toml are honoured."""
        (tmp_path / "pyproject.toml").write_text(
            '[tool.git-version]\nlabel-bumps = ["patch", "major"]\nchar-limit = 40\n'
        )

        result = runner.invoke(cli, ["major", "-p", str(tmp_path), "-l", "beta"])

        assert result.exit_code == 0, result.output
        session = _session(mock_run_session)
        assert str(session.proposed_version) == "v2.0.0-beta"
        assert session.input.char_limit == 40

    def test_invalid_label(
        self, runner: CliRunner, mock_run_session: MagicMock, tmp_path: Path
    ) -> None:
        """A label with a dot would break the tag name and is refused."""
        result = runner.invoke(cli, ["patch", "-p", str(tmp_path), "-l", "rc.1"])

        assert result.exit_code == 2
        assert "--label" in result.output
        mock_run_session.assert_not_called()

    def test_invalid_config(
        self, runner: CliRunner, mock_run_session: MagicMock, tmp_path: Path
    ) -> None:
        """A broken [tool.git-version] table exits 1 before prompting."""
        (tmp_path / "pyproject.toml").write_text("[tool.git-version]\nchar-limit = -1\n")

        result = runner.invoke(cli, ["patch", "-p", str(tmp_path)])

        assert result.exit_code == 1
        assert "char-limit" in result.output

    def test_malformed_tag_aborts(
        self,
        runner: CliRunner,
        mock_repo: MagicMock,
        mock_run_session: MagicMock,
        tmp_path: Path,
    ) -> None:
        """One broken version tag stops the command before the prompt."""
        mock_repo.tags.return_value = [
            TagRef(name="v1.2.3", annotated=True),
            TagRef(name="v1.x.0", annotated=True),
        ]

        result = runner.invoke(cli, ["patch", "-p", str(tmp_path)])

        assert result.exit_code == 1
        assert "error parsing minor version of tag 'v1.x.0'" in result.output
        mock_run_session.assert_not_called()

    def test_not_a_repository(
        self,
        runner: CliRunner,
        open_repo: MagicMock,
        mock_run_session: MagicMock,
        tmp_path: Path,
    ) -> None:
        """Opening failures exit 1 with git's complaint."""
        open_repo.open.side_effect = NotARepositoryError(tmp_path)

        result = runner.invoke(cli, ["patch", "-p", str(tmp_path)])

        assert result.exit_code == 1
        assert "not a git repository" in result.output
        mock_run_session.assert_not_called()

    def test_failed_session_still_exits_zero(
        self, runner: CliRunner, mock_run_session: MagicMock, tmp_path: Path
    ) -> None:
        """Tag-creation failures are shown in the session, not as an exit code."""
        mock_run_session.return_value = SessionState.FAILED

        result = runner.invoke(cli, ["patch", "-p", str(tmp_path)])

        assert result.exit_code == 0


@pytest.mark.usefixtures("open_repo")
def test_requires_interactive_terminal(
    runner: CliRunner, mock_run_session: MagicMock, tmp_path: Path
) -> None:
    """Without a terminal on stdin the command refuses to prompt."""
    with patch("git_version.cli._is_interactive", return_value=False):
        result = runner.invoke(cli, ["patch", "-p", str(tmp_path)])

    assert result.exit_code == 1
    assert "interactive terminal is required" in result.output
    mock_run_session.assert_not_called()


def _scripted(*keys: Key) -> Callable[[AnnotationSession], SessionState]:
    """Run the real session loop with a fixed key sequence."""

    def _run(session: AnnotationSession) -> SessionState:
        pending = iter(keys)
        console = Console(file=io.StringIO())
        return run_session(session, read=lambda: next(pending), console=console)

    return _run


@requires_git
@pytest.mark.usefixtures("interactive")
class TestEndToEnd:
    """Full command runs against a real repository with scripted keys."""

    def _tags(self, repo: Path) -> list[str]:
        out = subprocess.run(
            ["git", "tag", "--list"], cwd=repo, capture_output=True, text=True, check=True
        )
        return out.stdout.split()

    def test_autofill_and_confirm_creates_tag(
        self, runner: CliRunner, git_repo: Path, run_git: Callable[..., str]
    ) -> None:
        """Autofill plus Enter tags HEAD with the last commit message."""
        run_git(git_repo, "tag", "-a", "v0.3.9", "-m", "old")
        script = _scripted(Key("right"), Key("enter"))

        with patch("git_version.cli.run_session", side_effect=script):
            result = runner.invoke(cli, ["minor", "-p", str(git_repo)])

        assert result.exit_code == 0, result.output
        assert set(self._tags(git_repo)) == {"v0.3.9", "v0.4.0"}
        message = run_git(git_repo, "tag", "-l", "--format=%(contents)", "v0.4.0")
        assert message == "initial commit"

    def test_first_tag_in_repository(
        self, runner: CliRunner, git_repo: Path
    ) -> None:
        """With no tags, patch proposes v0.0.1 from v0.0.0."""
        script = _scripted(Key.typed("first"), Key("enter"))

        with patch("git_version.cli.run_session", side_effect=script):
            result = runner.invoke(cli, ["patch", "-p", str(git_repo)])

        assert result.exit_code == 0, result.output
        assert self._tags(git_repo) == ["v0.0.1"]

    def test_cancel_leaves_repository_untouched(
        self, runner: CliRunner, git_repo: Path
    ) -> None:
        """Esc quits without writing a tag."""
        script = _scripted(Key.typed("never"), Key("esc"))

        with patch("git_version.cli.run_session", side_effect=script):
            result = runner.invoke(cli, ["major", "-p", str(git_repo)])

        assert result.exit_code == 0, result.output
        assert self._tags(git_repo) == []

    def test_existing_tag_is_reported_not_overwritten(
        self, runner: CliRunner, git_repo: Path, run_git: Callable[..., str]
    ) -> None:
        """A name held by a lightweight tag fails the session and is left alone."""
        # v1.0.0 lightweight: ignored by resolution but still occupies the name
        run_git(git_repo, "tag", "-a", "v0.9.9", "-m", "old")
        run_git(git_repo, "tag", "v1.0.0")
        states: list[SessionState] = []

        def script(session: AnnotationSession) -> SessionState:
            state = _scripted(Key.typed("go"), Key("enter"))(session)
            states.append(state)
            return state

        with patch("git_version.cli.run_session", side_effect=script):
            result = runner.invoke(cli, ["major", "-p", str(git_repo)])

        assert result.exit_code == 0, result.output
        assert states == [SessionState.FAILED]
        assert run_git(git_repo, "cat-file", "-t", "v1.0.0") == "commit"
