"""Tests for the ProjectFiles sync facade."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from scriptsync.client.api import APIError, ScriptClient
from scriptsync.client.project import ProjectConfig
from scriptsync.client.sync.engine import ProjectFiles, extract_syntax_error
from scriptsync.client.sync.ignore import IgnoreRuleSet
from scriptsync.client.sync.remote import RemoteFile
from scriptsync.client.sync.types import ConfigError, FileConflictError, PushError
from scriptsync.core.types import FileType, ProjectFile


def write(root: Path, relative: str, content: str = "") -> None:
    """Create a file with parents."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


@pytest.fixture
def client() -> MagicMock:
    """Create a mock API client."""
    mock = MagicMock(spec=ScriptClient)
    mock.get_content.return_value = []
    return mock


@pytest.fixture
def config(tmp_path: Path) -> ProjectConfig:
    """Create a project config rooted in tmp_path."""
    project = ProjectConfig.default(tmp_path)
    project.script_id = "script-123"
    return project


@pytest.fixture
def project(config: ProjectConfig, client: MagicMock) -> ProjectFiles:
    """Create the sync facade with default ignore rules."""
    return ProjectFiles(config, IgnoreRuleSet.default(), client)


class TestExtractSyntaxError:
    """Tests for syntax error formatting."""

    def test_not_a_syntax_error(self) -> None:
        """Should return None for other messages."""
        assert extract_syntax_error("Permission denied", []) is None

    def test_formats_message_and_snippet(self) -> None:
        """Should mark the failing line with two lines of context."""
        source = "\n".join(f"line{i}" for i in range(1, 8))
        files = [ProjectFile("Code", "Code.js", FileType.SCRIPT, source)]

        result = extract_syntax_error(
            "Syntax error: SyntaxError: Unexpected token line: 4 file: Code.gs", files
        )

        assert result is not None
        message, snippet = result
        assert message == 'SyntaxError: Unexpected token in file "Code.gs" at line 4'
        assert snippet.splitlines() == [
            "     2 | line2",
            "     3 | line3",
            ">    4 | line4",
            "     5 | line5",
            "     6 | line6",
        ]

    def test_snippet_at_file_start(self) -> None:
        """Context is clipped at the first line."""
        files = [ProjectFile("Code", "Code.js", FileType.SCRIPT, "a\nb")]

        _, snippet = extract_syntax_error("Syntax error: Bad line: 1 file: Code", files)

        assert snippet.splitlines() == [">    1 | a", "     2 | b"]

    def test_unknown_file(self) -> None:
        """Should still format the message when the file is not found."""
        result = extract_syntax_error("Syntax error: Bad line: 1 file: Other", [])
        assert result == ('Bad in file "Other" at line 1', "Could not retrieve code snippet.")


class TestLocalOperations:
    """Tests for operations that only read the content directory."""

    def test_collect_uses_config(self, tmp_path: Path, config: ProjectConfig) -> None:
        """Should honour skip_subdirectories and push order from config."""
        write(tmp_path, "a.js")
        write(tmp_path, "b.js")
        write(tmp_path, "sub/c.js")
        config.skip_subdirectories = True
        config.file_push_order = ["b.js"]

        files = ProjectFiles(config, IgnoreRuleSet.default()).collect_local_files()

        assert [f.local_path for f in files] == ["b.js", "a.js"]

    def test_untracked_files(self, tmp_path: Path, project: ProjectFiles) -> None:
        """Should list untracked entries collapsed to directories."""
        write(tmp_path, "Code.js")
        write(tmp_path, "docs/readme.md")

        assert project.get_untracked_files() == ["docs/"]

    def test_missing_from_push_order(self, config: ProjectConfig, project: ProjectFiles) -> None:
        """Should list push order entries that matched nothing."""
        config.file_push_order = ["a.js", "lib/b", "gone.js"]
        pushed = [
            ProjectFile("a", "a.js", FileType.SCRIPT),
            ProjectFile("lib/b", "lib/b.js", FileType.SCRIPT),
        ]

        assert project.missing_from_push_order(pushed) == ["gone.js"]

    def test_remote_operation_needs_client(self, config: ProjectConfig) -> None:
        """Remote operations without a client are a programming error."""
        with pytest.raises(RuntimeError):
            ProjectFiles(config, IgnoreRuleSet.default()).fetch_remote()


class TestPush:
    """Tests for ProjectFiles.push."""

    def test_pushes_whole_set(
        self, tmp_path: Path, project: ProjectFiles, client: MagicMock
    ) -> None:
        """Should send every tracked file in one update."""
        write(tmp_path, "appsscript.json", "{}")
        write(tmp_path, "Code.js", "main")

        pushed = project.push()

        assert [f.remote_name for f in pushed] == ["Code", "appsscript"]
        client.update_content.assert_called_once_with(
            "script-123",
            [
                {"name": "Code", "type": "SERVER_JS", "source": "main"},
                {"name": "appsscript", "type": "JSON", "source": "{}"},
            ],
        )

    def test_nothing_to_push(self, project: ProjectFiles, client: MagicMock) -> None:
        """Should not call the API when nothing is tracked."""
        assert project.push() == []
        client.update_content.assert_not_called()

    def test_requires_script_id(self, config: ProjectConfig, project: ProjectFiles) -> None:
        """Should fail before any network call without a scriptId."""
        config.script_id = None
        with pytest.raises(ConfigError, match="scriptId"):
            project.push()

    def test_conflict_prevents_push(
        self, tmp_path: Path, project: ProjectFiles, client: MagicMock
    ) -> None:
        """A local name conflict should abort the push."""
        write(tmp_path, "Code.js")
        write(tmp_path, "Code.gs")

        with pytest.raises(FileConflictError):
            project.push()
        client.update_content.assert_not_called()

    def test_transport_failure(
        self, tmp_path: Path, project: ProjectFiles, client: MagicMock
    ) -> None:
        """Should wrap API errors with the attempted files."""
        write(tmp_path, "Code.js", "x")
        cause = APIError("Internal error", 500)
        client.update_content.side_effect = cause

        with pytest.raises(PushError) as exc_info:
            project.push()

        assert exc_info.value.cause is cause
        assert [f.local_path for f in exc_info.value.files] == ["Code.js"]
        assert exc_info.value.snippet is None
        assert client.update_content.call_count == 1

    def test_syntax_error(self, tmp_path: Path, project: ProjectFiles, client: MagicMock) -> None:
        """Should attach a snippet for script syntax errors."""
        write(tmp_path, "Code.js", "ok\nbroken(\nok")
        client.update_content.side_effect = APIError(
            "Syntax error: Missing ) line: 2 file: Code", 400, "INVALID_ARGUMENT"
        )

        with pytest.raises(PushError) as exc_info:
            project.push()

        assert str(exc_info.value) == 'Missing ) in file "Code" at line 2'
        assert ">    2 | broken(" in exc_info.value.snippet


class TestChangedFiles:
    """Tests for get_changed_files."""

    def test_compares_with_remote(
        self, tmp_path: Path, project: ProjectFiles, client: MagicMock
    ) -> None:
        """Should report new and modified files only."""
        write(tmp_path, "Same.js", "same")
        write(tmp_path, "Edited.js", "new")
        write(tmp_path, "Added.js", "added")
        client.get_content.return_value = [
            RemoteFile("Same", "SERVER_JS", "same"),
            RemoteFile("Edited", "SERVER_JS", "old"),
        ]

        changed = project.get_changed_files()

        assert sorted(f.remote_name for f in changed) == ["Added", "Edited"]

    def test_extension_differences_do_not_count(
        self, tmp_path: Path, project: ProjectFiles, client: MagicMock
    ) -> None:
        """A .gs file matching the remote source is unchanged."""
        write(tmp_path, "Code.gs", "same")
        client.get_content.return_value = [RemoteFile("Code", "SERVER_JS", "same")]

        assert project.get_changed_files() == []

    def test_remote_only_file_is_a_change(
        self, tmp_path: Path, project: ProjectFiles, client: MagicMock
    ) -> None:
        """A file deleted locally but still on the remote needs a push."""
        write(tmp_path, "Code.js", "a")
        client.get_content.return_value = [
            RemoteFile("Code", "SERVER_JS", "a"),
            RemoteFile("Old", "SERVER_JS", "b"),
        ]

        diff = project.diff_remote()

        assert diff
        assert diff.changed == []
        assert diff.removed == ["Old"]

    def test_in_sync(self, tmp_path: Path, project: ProjectFiles, client: MagicMock) -> None:
        """Matching file sets give an empty diff."""
        write(tmp_path, "Code.js", "a")
        client.get_content.return_value = [RemoteFile("Code", "SERVER_JS", "a")]

        assert not project.diff_remote()


class TestPull:
    """Tests for ProjectFiles.pull and prune."""

    def test_writes_snapshot(
        self, tmp_path: Path, project: ProjectFiles, client: MagicMock
    ) -> None:
        """Should write non-empty files and skip placeholders."""
        client.get_content.return_value = [
            RemoteFile("Code", "SERVER_JS", "main"),
            RemoteFile("ui/page", "HTML", "<p>"),
            RemoteFile("Empty", "SERVER_JS", ""),
        ]

        result = project.pull()

        assert result.written == ["Code.js", "ui/page.html"]
        assert (tmp_path / "ui/page.html").read_text() == "<p>"
        assert not (tmp_path / "Empty.js").exists()
        assert result.prunable == []
        client.get_content.assert_called_once_with("script-123", None)

    def test_version_number(self, project: ProjectFiles, client: MagicMock) -> None:
        """Should request the given version."""
        project.pull(version_number=3)
        client.get_content.assert_called_once_with("script-123", 3)

    def test_find_unused_and_prune(
        self, tmp_path: Path, project: ProjectFiles, client: MagicMock
    ) -> None:
        """Should list files gone from the remote and delete them on request."""
        write(tmp_path, "Code.js", "old")
        write(tmp_path, "lib/Old.js", "old")
        client.get_content.return_value = [RemoteFile("Code", "SERVER_JS", "new")]

        result = project.pull(find_unused=True)

        assert result.prunable == ["lib/Old.js"]
        assert (tmp_path / "lib/Old.js").exists()

        assert project.prune(result.prunable) == ["lib/Old.js"]
        assert not (tmp_path / "lib").exists()
        assert (tmp_path / "Code.js").read_text() == "new"

    def test_first_pull_into_missing_content_dir(
        self, tmp_path: Path, config: ProjectConfig, client: MagicMock
    ) -> None:
        """A content directory that does not exist yet is created by the pull."""
        config.content_dir = tmp_path / "src"
        project = ProjectFiles(config, IgnoreRuleSet.default(), client)
        client.get_content.return_value = [RemoteFile("Code", "SERVER_JS", "main")]

        result = project.pull(find_unused=True)

        assert result.written == ["Code.js"]
        assert result.prunable == []
        assert (tmp_path / "src" / "Code.js").read_text() == "main"

    def test_close_closes_client(self, project: ProjectFiles, client: MagicMock) -> None:
        """Leaving the context should close the API client."""
        with project:
            pass

        client.close.assert_called_once_with()


class TestWatch:
    """Tests for watcher creation."""

    def test_watch_returns_unstarted_watcher(
        self, tmp_path: Path, project: ProjectFiles
    ) -> None:
        """Should create a watcher on the content directory."""
        watcher = project.watch(lambda paths: None, debounce_s=0.1)

        assert watcher.content_dir == tmp_path.resolve()
        assert watcher.is_running is False
