"""Tests for local file collection."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from scriptsync.client.sync.collector import (
    collect_local_files,
    iter_local_paths,
    sort_by_push_order,
)
from scriptsync.client.sync.extensions import ExtensionMap
from scriptsync.client.sync.ignore import IgnoreRuleSet
from scriptsync.client.sync.types import FileConflictError
from scriptsync.core.types import FileType, ProjectFile


def write(root: Path, relative: str, content: str = "") -> Path:
    """Create a file with parents."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestIterLocalPaths:
    """Tests for directory walking."""

    def test_sorted_posix_paths(self, tmp_path: Path) -> None:
        """Should list nested files as sorted POSIX paths."""
        write(tmp_path, "b.js")
        write(tmp_path, "a/z.js")
        write(tmp_path, "a/y/x.js")

        assert list(iter_local_paths(tmp_path)) == ["a/y/x.js", "a/z.js", "b.js"]

    def test_non_recursive(self, tmp_path: Path) -> None:
        """Should stay at the top level when not recursive."""
        write(tmp_path, "top.js")
        write(tmp_path, "sub/deep.js")

        assert list(iter_local_paths(tmp_path, recursive=False)) == ["top.js"]

    def test_missing_root(self, tmp_path: Path) -> None:
        """A directory that does not exist yet has no files."""
        assert list(iter_local_paths(tmp_path / "src")) == []

    @pytest.mark.skipif(os.name == "nt", reason="Symlinks need privileges on Windows")
    def test_skips_symlinks(self, tmp_path: Path) -> None:
        """Should not follow or list symlinks."""
        target = write(tmp_path / "outside", "secret.js")
        content = tmp_path / "content"
        write(content, "Code.js")
        (content / "link.js").symlink_to(target)
        (content / "linkdir").symlink_to(target.parent)

        assert list(iter_local_paths(content)) == ["Code.js"]


class TestCollectLocalFiles:
    """Tests for collect_local_files."""

    def test_default_project(self, tmp_path: Path) -> None:
        """Should collect the standard four-file project."""
        write(tmp_path, "appsscript.json", "{}")
        write(tmp_path, "Code.js", "function main() {}")
        write(tmp_path, "sub/Code.js", "function sub() {}")
        write(tmp_path, "page.html", "<p></p>")

        files = collect_local_files(tmp_path, IgnoreRuleSet.default(), ExtensionMap())

        assert sorted(f.remote_name for f in files) == ["Code", "appsscript", "page", "sub/Code"]
        by_name = {f.remote_name: f for f in files}
        assert by_name["appsscript"].type is FileType.CONFIG
        assert by_name["sub/Code"].local_path == "sub/Code.js"
        assert by_name["sub/Code"].source == "function sub() {}"
        assert by_name["page"].type is FileType.MARKUP

    def test_conflict_raises(self, tmp_path: Path) -> None:
        """Two files with the same remote name should fail the collection."""
        write(tmp_path, "Code.js")
        write(tmp_path, "Code.gs")

        with pytest.raises(FileConflictError) as exc_info:
            collect_local_files(tmp_path, IgnoreRuleSet.default(), ExtensionMap())

        assert exc_info.value.basename == "Code"
        assert sorted(exc_info.value.paths) == ["Code.gs", "Code.js"]

    def test_no_conflict_across_directories(self, tmp_path: Path) -> None:
        """Same file name in different directories is not a conflict."""
        write(tmp_path, "Code.js")
        write(tmp_path, "lib/Code.gs")

        files = collect_local_files(tmp_path, IgnoreRuleSet.default(), ExtensionMap())

        assert [f.remote_name for f in files] == ["Code", "lib/Code"]

    def test_ignored_files_skipped(self, tmp_path: Path) -> None:
        """Files matched by the rules should not be collected."""
        write(tmp_path, "Code.js")
        write(tmp_path, "test/Code.test.js")

        rules = IgnoreRuleSet(["test/**"])
        files = collect_local_files(tmp_path, rules, ExtensionMap())

        assert [f.local_path for f in files] == ["Code.js"]

    def test_unknown_extensions_skipped(self, tmp_path: Path) -> None:
        """Files with unregistered extensions are untracked, not errors."""
        write(tmp_path, "Code.js")
        write(tmp_path, "notes.txt")
        write(tmp_path, "package.json")

        files = collect_local_files(tmp_path, IgnoreRuleSet([]), ExtensionMap())

        assert [f.local_path for f in files] == ["Code.js"]

    def test_hidden_paths_skipped(self, tmp_path: Path) -> None:
        """Dot directories are skipped unless a negation names them."""
        write(tmp_path, "Code.js")
        write(tmp_path, ".hidden/Secret.js")
        write(tmp_path, ".config/Setup.js")

        rules = IgnoreRuleSet(["!.config/**"])
        files = collect_local_files(tmp_path, rules, ExtensionMap())

        assert [f.local_path for f in files] == [".config/Setup.js", "Code.js"]

    def test_skip_subdirectories(self, tmp_path: Path) -> None:
        """Should only collect top-level files when asked."""
        write(tmp_path, "Code.js")
        write(tmp_path, "sub/Other.js")

        files = collect_local_files(
            tmp_path, IgnoreRuleSet.default(), ExtensionMap(), skip_subdirectories=True
        )

        assert [f.local_path for f in files] == ["Code.js"]

    def test_push_order(self, tmp_path: Path) -> None:
        """filePushOrder entries should come first, the rest sorted by name."""
        for name in ["a.js", "b.js", "c.js", "d.js"]:
            write(tmp_path, name)

        files = collect_local_files(
            tmp_path, IgnoreRuleSet.default(), ExtensionMap(), file_push_order=["c.js", "a"]
        )

        assert [f.remote_name for f in files] == ["c", "a", "b", "d"]

    def test_collection_is_read_only(self, tmp_path: Path) -> None:
        """Collection should not rename or rewrite files."""
        path = write(tmp_path, "Code.gs", "x")

        collect_local_files(tmp_path, IgnoreRuleSet.default(), ExtensionMap())

        assert path.exists()
        assert not (tmp_path / "Code.js").exists()

    def test_unreadable_file_skipped(self, tmp_path: Path) -> None:
        """Files that are not valid UTF-8 are skipped with a warning."""
        write(tmp_path, "Code.js", "ok")
        (tmp_path / "Binary.js").write_bytes(b"\xff\xfe\x00")

        files = collect_local_files(tmp_path, IgnoreRuleSet.default(), ExtensionMap())

        assert [f.local_path for f in files] == ["Code.js"]


class TestSortByPushOrder:
    """Tests for sort_by_push_order."""

    def test_without_order(self) -> None:
        """Should sort by remote name."""
        files = [
            ProjectFile("b", "b.js", FileType.SCRIPT),
            ProjectFile("a", "a.js", FileType.SCRIPT),
        ]
        assert [f.remote_name for f in sort_by_push_order(files)] == ["a", "b"]

    def test_matches_local_path_or_remote_name(self) -> None:
        """Entries may name a local path or a remote name."""
        files = [
            ProjectFile("a", "a.js", FileType.SCRIPT),
            ProjectFile("lib/b", "lib/b.js", FileType.SCRIPT),
            ProjectFile("c", "c.html", FileType.MARKUP),
        ]

        ordered = sort_by_push_order(files, ["./lib/b.js", "c"])

        assert [f.remote_name for f in ordered] == ["lib/b", "c", "a"]
