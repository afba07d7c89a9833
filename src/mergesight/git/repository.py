"""Read-only wrapper around a GitPython repository."""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager, suppress
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from git import Repo
from git.exc import (
    GitCommandError,
    InvalidGitRepositoryError,
    NoSuchPathError,
)
from git.objects import Commit

from mergesight.core.errors import (
    BackendOperationError,
    RepositoryAccessError,
)
from mergesight.core.log import logger

UNMERGED_CODES = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})
PLACEHOLDER_DESCRIPTION = "Unnamed repository"
LICENSE_FILES = ("LICENSE", "LICENSE.md", "LICENSE.txt", "COPYING")


@dataclass
class StatusEntry:
    """One line of `git status --porcelain=v1`."""

    index: str
    worktree: str
    path: str
    orig_path: str | None = None

    @property
    def code(self) -> str:
        return self.index + self.worktree

    @property
    def is_untracked(self) -> bool:
        return self.code == "??"

    @property
    def is_ignored(self) -> bool:
        return self.code == "!!"

    @property
    def is_unmerged(self) -> bool:
        return self.code in UNMERGED_CODES

    @property
    def is_staged(self) -> bool:
        return not self.is_unmerged and self.index in "AMDRCT"

    @property
    def is_unstaged(self) -> bool:
        return self.is_unmerged or self.worktree in "MDT"


def parse_porcelain(output: str) -> list[StatusEntry]:
    """Parse NUL-separated `git status --porcelain=v1 -z` output.

    Rename and copy entries carry their source path in the field
    that follows.
    """
    entries = []
    fields = output.split("\0")
    i = 0
    while i < len(fields):
        field = fields[i]
        i += 1
        if len(field) < 4:
            continue
        entry = StatusEntry(index=field[0], worktree=field[1], path=field[3:])
        if entry.index in "RC" and i < len(fields):
            entry.orig_path = fields[i]
            i += 1
        entries.append(entry)
    return entries


@contextmanager
def backend_operation(operation: str) -> Iterator[None]:
    """Translate GitPython failures into BackendOperationError."""
    try:
        yield
    except GitCommandError as e:
        raise BackendOperationError(operation, str(e).strip()) from e


class RepositoryHandle:
    """Read-only view of one repository.

    Every query either answers from repository state or raises
    BackendOperationError. Optional information (a remote, a HEAD
    commit, a description) comes back as None instead.
    """

    def __init__(self, repo: Repo, path: Path):
        self.repo = repo
        self.path = path

    @classmethod
    def open(cls, path: Path | str) -> RepositoryHandle:
        """Open the repository at path.

        Args:
            path: Repository root (working tree or bare directory)

        Returns:
            RepositoryHandle for the repository

        Raises:
            RepositoryAccessError: If path is not an openable repository
        """
        resolved = Path(path).resolve()
        try:
            repo = Repo(resolved)
        except NoSuchPathError as e:
            raise RepositoryAccessError(resolved, "no such path") from e
        except InvalidGitRepositoryError as e:
            raise RepositoryAccessError(
                resolved, "not a git repository"
            ) from e
        except (GitCommandError, OSError) as e:
            raise RepositoryAccessError(resolved, str(e)) from e
        logger.debug("Opened repository", path=str(resolved))
        return cls(repo, resolved)

    @property
    def workdir(self) -> Path:
        if self.repo.working_tree_dir is None:
            return self.path
        return Path(self.repo.working_tree_dir)

    @property
    def git_dir(self) -> Path:
        return Path(self.repo.git_dir)

    def close(self):
        self.repo.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()

    # Merge state

    def is_merging(self) -> bool:
        return (self.git_dir / "MERGE_HEAD").exists()

    def unmerged_paths(self) -> list[str]:
        """Paths with a non-zero stage in the index."""
        try:
            entries = self.repo.index.entries
        except (OSError, ValueError) as e:
            raise BackendOperationError("read index", str(e)) from e
        return sorted({path for path, stage in entries if stage != 0})

    # Working tree status

    def status(self, untracked: bool = True) -> list[StatusEntry]:
        """Run a porcelain status pass.

        Args:
            untracked: Include untracked files

        Returns:
            Status entries; ignored files are never included
        """
        mode = "normal" if untracked else "no"
        with backend_operation("status"):
            output = self.repo.git.status(
                "--porcelain=v1", "-z", f"--untracked-files={mode}"
            )
        return parse_porcelain(output)

    def conflicted_entries(self) -> list[StatusEntry]:
        return [e for e in self.status(untracked=False) if e.is_unmerged]

    def read_file(self, relative_path: str) -> str:
        """Read a working tree file.

        Raises:
            OSError: If the file cannot be read
            UnicodeDecodeError: If the file is not UTF-8 text
        """
        return (self.workdir / relative_path).read_text(encoding="utf-8")

    # Refs and history

    def head_commit(self) -> Commit | None:
        """HEAD commit, or None for a repository without commits."""
        try:
            return self.repo.head.commit
        except ValueError:
            return None

    def head_commit_time(self) -> datetime | None:
        commit = self.head_commit()
        if commit is None:
            return None
        return commit.committed_datetime

    def current_branch(self) -> str:
        """Active branch name, "HEAD" when detached.

        An unborn branch (no commits yet) still reports its name.
        """
        with backend_operation("read HEAD"):
            if self.repo.head.is_detached:
                return "HEAD"
            return self.repo.head.reference.name

    def branches(self) -> list[str]:
        with backend_operation("list branches"):
            return [head.name for head in self.repo.heads]

    def tags(self) -> list[str]:
        with backend_operation("list tags"):
            return [tag.name for tag in self.repo.tags]

    def remote_url(self, name: str = "origin") -> str | None:
        try:
            remote = self.repo.remote(name)
        except ValueError:
            return None
        with backend_operation("read remote"):
            return next(iter(remote.urls), None)

    def stash_count(self) -> int:
        with backend_operation("list stashes"):
            output = self.repo.git.stash("list")
        return len([line for line in output.splitlines() if line.strip()])

    def ahead_behind(self) -> tuple[int, int]:
        """Commits ahead of and behind the tracking branch.

        Returns (0, 0) when detached, unborn or without upstream.
        """
        if self.repo.head.is_detached or self.head_commit() is None:
            return 0, 0
        with backend_operation("compare with upstream"):
            tracking = self.repo.active_branch.tracking_branch()
            if tracking is None or not tracking.is_valid():
                return 0, 0
            output = self.repo.git.rev_list(
                "--left-right", "--count", f"{tracking.path}...HEAD"
            )
        behind, ahead = (int(n) for n in output.split())
        return ahead, behind

    def contributors(self, limit: int) -> list[str]:
        """Distinct author names over the last `limit` commits from HEAD."""
        if self.head_commit() is None:
            return []
        names: list[str] = []
        with backend_operation("walk commits"):
            for commit in self.repo.iter_commits("HEAD", max_count=limit):
                name = commit.author.name
                if name and name not in names:
                    names.append(name)
        return names

    def commit_count(self) -> int:
        if self.head_commit() is None:
            return 0
        with backend_operation("count commits"):
            return int(self.repo.git.rev_list("--count", "HEAD"))

    def head_tree_entry_count(self) -> int:
        commit = self.head_commit()
        if commit is None:
            return 0
        with backend_operation("read tree"):
            return len(commit.tree)

    def head_blob_paths(self) -> list[str]:
        """All file paths in the HEAD tree."""
        commit = self.head_commit()
        if commit is None:
            return []
        with backend_operation("read tree"):
            return [
                item.path for item in commit.tree.traverse()
                if item.type == "blob"
            ]

    # Metadata directory

    def metadata_size(self) -> int:
        """Total size in bytes of all files under the git directory."""
        total = 0
        for root, _, files in os.walk(self.git_dir):
            for name in files:
                # Lock and temp files can disappear mid-walk
                with suppress(OSError):
                    total += os.path.getsize(os.path.join(root, name))
        return total

    def description(self) -> str | None:
        try:
            text = (self.git_dir / "description").read_text().strip()
        except OSError:
            return None
        if not text or text.startswith(PLACEHOLDER_DESCRIPTION):
            return None
        return text

    def license(self) -> str | None:
        """First non-empty line of the first license file found."""
        for name in LICENSE_FILES:
            try:
                text = (self.workdir / name).read_text(errors="replace")
            except OSError:
                continue
            for line in text.splitlines():
                if line.strip():
                    return line.strip()
        return None


__all__ = [
    "RepositoryHandle",
    "StatusEntry",
    "backend_operation",
    "parse_porcelain",
]
