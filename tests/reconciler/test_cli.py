"""Tests for the gphotos-reconcile command line."""

import io
import json
import logging
import os
import re

import pytest

from gphotos_reconcile.common import ConfigLoader
from gphotos_reconcile.reconciler import cli
from gphotos_reconcile.reconciler.config import ReconcilerAppConfig
from gphotos_reconcile.reconciler.filesystem import Filesystem

FULL_NAME = "Graduation ceremony in the main hall afternoon.jpg"
SHORT_NAME = "Graduation ceremony in the main hall.jpg"


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """No system/user config, no env overrides, and root logging restored afterwards."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(ConfigLoader, "_load_system_config", lambda self: None)
    monkeypatch.setattr(ConfigLoader, "_load_user_config", lambda self: None)
    for key in list(os.environ):
        if key.startswith("GPHOTOS_RECONCILE_"):
            monkeypatch.delenv(key)

    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def takeout(tmp_path):
    album = tmp_path / "export" / "Takeout" / "Google Photos" / "Graduation"
    album.mkdir(parents=True)
    (album / SHORT_NAME).write_bytes(b"\xff\xd8")
    (album / f"{SHORT_NAME}.supplemental-metadata.json").write_text(
        json.dumps({"title": FULL_NAME}), encoding='utf-8'
    )
    return tmp_path / "export", album


class TestFixTruncatedCommand:
    """Tests for fix_truncated_command."""

    def test_renames_and_prints_summary(self, takeout):
        root, album = takeout
        out = io.StringIO()

        code = cli.fix_truncated_command(ReconcilerAppConfig(), target_media_path_override=root, out=out)

        assert code == cli.EXIT_OK
        assert (album / FULL_NAME).exists()
        assert (album / f"{FULL_NAME}.supplemental-metadata.json").exists()
        assert "TRUNCATED FILENAME FIX SUMMARY" in out.getvalue()

    def test_path_from_config(self, takeout):
        root, album = takeout
        config = ReconcilerAppConfig(reconciler={"target_media_path": str(root)})

        assert cli.fix_truncated_command(config, out=io.StringIO()) == cli.EXIT_OK
        assert (album / FULL_NAME).exists()

    def test_missing_path(self):
        assert cli.fix_truncated_command(ReconcilerAppConfig(), out=io.StringIO()) == cli.EXIT_ERROR

    def test_nonexistent_directory(self, tmp_path):
        code = cli.fix_truncated_command(
            ReconcilerAppConfig(), target_media_path_override=tmp_path / "nope", out=io.StringIO()
        )
        assert code == cli.EXIT_ERROR

    def test_existing_target_is_not_a_failure(self, takeout):
        root, album = takeout
        (album / FULL_NAME).write_bytes(b"taken")

        code = cli.fix_truncated_command(ReconcilerAppConfig(), target_media_path_override=root, out=io.StringIO())

        assert code == cli.EXIT_OK
        assert (album / SHORT_NAME).exists()

    def test_rename_failures_exit_code(self, takeout, monkeypatch):
        root, album = takeout
        original_rename = Filesystem.rename

        def failing_rename(self, source, target):
            if source.name.endswith(".json"):
                raise PermissionError(f"Permission denied: {source}")
            original_rename(self, source, target)

        monkeypatch.setattr(Filesystem, "rename", failing_rename)
        out = io.StringIO()

        code = cli.fix_truncated_command(ReconcilerAppConfig(), target_media_path_override=root, out=out)

        assert code == cli.EXIT_RENAME_FAILURES
        assert (album / SHORT_NAME).exists()
        assert not (album / FULL_NAME).exists()


class TestExtractFailuresCommand:
    """Tests for extract_failures_command."""

    def test_prints_sorted_paths(self, tmp_path):
        diagnostics = tmp_path / "stderr.txt"
        diagnostics.write_text(
            "Error: File not writable - /p/Zoo - Day 2/b.jpg\n"
            "    1 image files updated\n"
            "Error: Bad format - /p/a.jpg\n",
            encoding='utf-8',
        )
        out = io.StringIO()

        code = cli.extract_failures_command(ReconcilerAppConfig(), str(diagnostics), out=out)

        assert code == cli.EXIT_OK
        assert out.getvalue().splitlines() == ["/p/a.jpg", "/p/Zoo - Day 2/b.jpg"]

    def test_stdin(self, monkeypatch):
        monkeypatch.setattr('sys.stdin', io.StringIO("Error: x - /p/c.jpg\n"))
        out = io.StringIO()

        assert cli.extract_failures_command(ReconcilerAppConfig(), "-", out=out) == cli.EXIT_OK
        assert out.getvalue() == "/p/c.jpg\n"

    def test_custom_marker(self, tmp_path):
        diagnostics = tmp_path / "log.txt"
        diagnostics.write_text("FAILED - /p/d.jpg\nError: x - /p/e.jpg\n", encoding='utf-8')
        config = ReconcilerAppConfig(reconciler={"failure_markers": ["FAILED"]})
        out = io.StringIO()

        cli.extract_failures_command(config, str(diagnostics), out=out)

        assert out.getvalue() == "/p/d.jpg\n"

    def test_trailing_token_from_config(self, tmp_path):
        diagnostics = tmp_path / "log.txt"
        diagnostics.write_text("Error: x - /p/Trip - Day 1/f.jpg (not updated)\n", encoding='utf-8')
        config = ReconcilerAppConfig(reconciler={"diagnostic_trailing": " (not updated)"})
        out = io.StringIO()

        cli.extract_failures_command(config, str(diagnostics), out=out)

        assert out.getvalue() == "/p/Trip - Day 1/f.jpg\n"

    def test_unreadable_file(self, tmp_path):
        code = cli.extract_failures_command(ReconcilerAppConfig(), str(tmp_path / "missing.txt"), out=io.StringIO())
        assert code == cli.EXIT_ERROR


class TestMain:
    """Tests for argument parsing and dispatch."""

    def test_fix_truncated(self, takeout, capsys):
        root, album = takeout

        code = cli.main(["fix-truncated", "--target-media-path", str(root)])

        assert code == cli.EXIT_OK
        assert (album / FULL_NAME).exists()
        assert "Fixed:" in capsys.readouterr().out

    def test_no_tryhard_flag(self, tmp_path, capsys):
        album = tmp_path / "photos"
        album.mkdir()
        (album / "Party(1).jpg").write_bytes(b"")
        (album / "Party.jpg(1).json").write_text(json.dumps({"title": "Party at the beach(1).jpg"}), encoding='utf-8')

        cli.main(["fix-truncated", "--target-media-path", str(album), "--no-tryhard"])

        assert (album / "Party(1).jpg").exists()
        assert re.search(r"No JSON sidecar:\s+1\n", capsys.readouterr().out)

    def test_config_file(self, takeout, tmp_path, capsys):
        root, album = takeout
        config_file = tmp_path / "custom.toml"
        config_file.write_text(f'[reconciler]\ntarget_media_path = "{root.as_posix()}"\n', encoding='utf-8')

        code = cli.main(["--config", str(config_file), "fix-truncated"])

        assert code == cli.EXIT_OK
        assert (album / FULL_NAME).exists()

    def test_extract_failures(self, tmp_path, capsys):
        diagnostics = tmp_path / "stderr.txt"
        diagnostics.write_text("Error: x - /p/Birthday Party - 16.42022/photo.jpg\n", encoding='utf-8')

        code = cli.main(["extract-failures", str(diagnostics)])

        assert code == cli.EXIT_OK
        assert capsys.readouterr().out == "/p/Birthday Party - 16.42022/photo.jpg\n"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.main([])
