"""Pytest configuration and fixtures for mergesight tests."""

import tempfile
from pathlib import Path

import pytest
from git import Repo
from git.exc import GitCommandError

from mergesight.core.log import ConsoleSink, setup_logger


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Configure logging for console-only mode during tests.

    This enables debug output during test runs without requiring
    authentication or sending logs to logfire.dev.
    """
    test_log_root = Path(tempfile.gettempdir()) / "mergesight-tests"
    setup_logger(
        log_root=test_log_root,
        run_name="test",
        console=ConsoleSink(level="debug"),
    )


def commit_files(repo: Repo, files: dict[str, str], message: str):
    """Write files into the working tree, stage and commit them."""
    workdir = Path(repo.working_tree_dir)
    for name, text in files.items():
        path = workdir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
    repo.index.add(list(files))
    return repo.index.commit(message)


@pytest.fixture
def git_repo(tmp_path):
    """Empty repository on branch main with a fixed identity."""
    repo = Repo.init(tmp_path / "repo")
    repo.git.symbolic_ref("HEAD", "refs/heads/main")
    with repo.config_writer() as config:
        config.set_value("user", "name", "Test User")
        config.set_value("user", "email", "test@example.com")
        config.set_value("merge", "conflictstyle", "merge")
        config.set_value("commit", "gpgsign", "false")
    yield repo
    repo.close()


@pytest.fixture
def committed_repo(git_repo):
    """Repository with one commit holding a README and a source file."""
    commit_files(
        git_repo,
        {"README.md": "hello\n", "src/app.py": "print('hi')\n"},
        "initial",
    )
    return git_repo


@pytest.fixture
def conflicted_repo(committed_repo):
    """Repository stopped in the middle of a conflicting merge.

    main and feature both change src/core.py, and main merging
    feature leaves a single conflict hunk in that file.
    """
    repo = committed_repo
    commit_files(repo, {"src/core.py": "value = 1\n"}, "add core")
    repo.git.checkout("-b", "feature")
    commit_files(repo, {"src/core.py": "value = 2\n"}, "feature change")
    repo.git.checkout("main")
    commit_files(repo, {"src/core.py": "value = 3\n"}, "main change")
    with pytest.raises(GitCommandError):
        repo.git.merge("feature")
    return repo
