"""Tests for the read-only repository wrapper."""

import pytest
from git import Repo

from conftest import commit_files
from mergesight.core.errors import (
    BackendOperationError,
    RepositoryAccessError,
)
from mergesight.git.repository import (
    RepositoryHandle,
    StatusEntry,
    backend_operation,
    parse_porcelain,
)


class TestParsePorcelain:
    """Tests for -z porcelain parsing."""

    def test_empty_output(self):
        assert parse_porcelain("") == []

    def test_simple_entries(self):
        output = "M  staged.py\0 M edited.py\0?? new.txt\0"

        entries = parse_porcelain(output)

        assert [e.path for e in entries] == [
            "staged.py", "edited.py", "new.txt"
        ]
        assert [e.code for e in entries] == ["M ", " M", "??"]

    def test_rename_consumes_source_path(self):
        output = "R  new name.py\0old name.py\0 D gone.txt\0"

        entries = parse_porcelain(output)

        assert len(entries) == 2
        assert entries[0].path == "new name.py"
        assert entries[0].orig_path == "old name.py"
        assert entries[1].path == "gone.txt"


class TestStatusEntry:
    """Tests for status code classification."""

    def test_untracked(self):
        entry = StatusEntry("?", "?", "x")
        assert entry.is_untracked
        assert not entry.is_staged
        assert not entry.is_unstaged

    def test_staged_and_unstaged(self):
        entry = StatusEntry("M", "M", "x")
        assert entry.is_staged
        assert entry.is_unstaged

    @pytest.mark.parametrize("code", ["DD", "AU", "UD", "UA", "DU", "AA", "UU"])
    def test_unmerged_counts_as_unstaged_only(self, code):
        entry = StatusEntry(code[0], code[1], "x")
        assert entry.is_unmerged
        assert entry.is_unstaged
        assert not entry.is_staged

    def test_ignored(self):
        assert StatusEntry("!", "!", "x").is_ignored


def test_backend_operation_wraps_git_errors(committed_repo):
    with pytest.raises(BackendOperationError) as excinfo:
        with backend_operation("show object"):
            committed_repo.git.cat_file("-p", "deadbeef")

    assert excinfo.value.operation == "show object"
    assert "show object" in str(excinfo.value)


class TestOpen:
    """Tests for opening repositories."""

    def test_missing_path(self, tmp_path):
        with pytest.raises(RepositoryAccessError) as excinfo:
            RepositoryHandle.open(tmp_path / "nowhere")
        assert excinfo.value.reason == "no such path"

    def test_plain_directory(self, tmp_path):
        with pytest.raises(RepositoryAccessError) as excinfo:
            RepositoryHandle.open(tmp_path)
        assert excinfo.value.reason == "not a git repository"

    def test_workdir_and_git_dir(self, git_repo):
        with RepositoryHandle.open(git_repo.working_tree_dir) as handle:
            assert handle.workdir == handle.path
            assert handle.git_dir == handle.path / ".git"


class TestEmptyRepository:
    """Queries on a repository without commits."""

    def test_unborn_branch_keeps_its_name(self, git_repo):
        with RepositoryHandle.open(git_repo.working_tree_dir) as handle:
            assert handle.current_branch() == "main"
            assert handle.head_commit() is None
            assert handle.head_commit_time() is None
            assert handle.commit_count() == 0
            assert handle.contributors(10) == []
            assert handle.head_blob_paths() == []
            assert handle.ahead_behind() == (0, 0)
            assert handle.branches() == []

    def test_default_description_is_ignored(self, git_repo):
        with RepositoryHandle.open(git_repo.working_tree_dir) as handle:
            assert handle.description() is None


class TestCommittedRepository:
    """Queries on a repository with history."""

    def test_history(self, committed_repo):
        commit_files(committed_repo, {"docs/guide.md": "x\n"}, "docs")

        with RepositoryHandle.open(committed_repo.working_tree_dir) as handle:
            assert handle.commit_count() == 2
            assert handle.contributors(10) == ["Test User"]
            assert handle.head_tree_entry_count() == 3
            assert sorted(handle.head_blob_paths()) == [
                "README.md", "docs/guide.md", "src/app.py"
            ]
            assert handle.head_commit_time() is not None
            assert handle.branches() == ["main"]

    def test_detached_head(self, committed_repo):
        committed_repo.git.checkout("--detach")

        with RepositoryHandle.open(committed_repo.working_tree_dir) as handle:
            assert handle.current_branch() == "HEAD"
            assert handle.ahead_behind() == (0, 0)

    def test_status(self, committed_repo):
        workdir = committed_repo.working_tree_dir
        with open(f"{workdir}/README.md", "a") as f:
            f.write("more\n")
        with open(f"{workdir}/notes.txt", "w") as f:
            f.write("new\n")

        with RepositoryHandle.open(workdir) as handle:
            codes = {e.path: e.code for e in handle.status()}
            tracked_only = handle.status(untracked=False)

        assert codes == {"README.md": " M", "notes.txt": "??"}
        assert [e.path for e in tracked_only] == ["README.md"]

    def test_tags_remote_and_stash(self, committed_repo):
        committed_repo.create_tag("v1.0")
        committed_repo.create_remote("origin", "https://example.com/r.git")
        workdir = committed_repo.working_tree_dir
        with open(f"{workdir}/README.md", "a") as f:
            f.write("stash me\n")
        committed_repo.git.stash("push")

        with RepositoryHandle.open(workdir) as handle:
            assert handle.tags() == ["v1.0"]
            assert handle.remote_url() == "https://example.com/r.git"
            assert handle.remote_url("upstream") is None
            assert handle.stash_count() == 1

    def test_ahead_of_upstream(self, committed_repo, tmp_path):
        workdir = committed_repo.working_tree_dir
        clone = Repo.clone_from(workdir, tmp_path / "clone")
        with clone.config_writer() as config:
            config.set_value("user", "name", "Clone User")
            config.set_value("user", "email", "clone@example.com")
            config.set_value("commit", "gpgsign", "false")
        commit_files(clone, {"extra.txt": "x\n"}, "extra")

        with RepositoryHandle.open(clone.working_tree_dir) as handle:
            assert handle.ahead_behind() == (1, 0)
        clone.close()

    def test_license_and_description(self, committed_repo):
        workdir = committed_repo.working_tree_dir
        with open(f"{workdir}/LICENSE", "w") as f:
            f.write("\nMIT License\n\nCopyright\n")
        with open(f"{committed_repo.git_dir}/description", "w") as f:
            f.write("Test fixture repository\n")

        with RepositoryHandle.open(workdir) as handle:
            assert handle.license() == "MIT License"
            assert handle.description() == "Test fixture repository"

    def test_metadata_size(self, committed_repo):
        with RepositoryHandle.open(committed_repo.working_tree_dir) as handle:
            assert handle.metadata_size() > 0


def test_unmerged_paths(conflicted_repo):
    with RepositoryHandle.open(conflicted_repo.working_tree_dir) as handle:
        assert handle.is_merging()
        assert handle.unmerged_paths() == ["src/core.py"]
        entries = handle.conflicted_entries()
        assert [(e.code, e.path) for e in entries] == [("UU", "src/core.py")]
        text = handle.read_file("src/core.py")

    assert text.startswith("<<<<<<< HEAD\n")
