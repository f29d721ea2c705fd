"""Tests for command parsing and dispatch."""

import logging
from pathlib import Path

import pytest

from keeper.common import CommandError
from keeper.commands import (
    EXIT_FAILURE, EXIT_OK, CheckCommand, RecordCommand, known_commands,
    parse_batch_file, parse_batch_lines, parse_command, run_command, run_commands,
)
from keeper.sfv import SfvConfig


class TestParseCommand:
    """Tests for parse_command()."""

    def test_record(self):
        command = parse_command(["record", "photos", "photos.sfv"])

        assert command == RecordCommand(source_dir=Path("photos"), manifest_path=Path("photos.sfv"))

    def test_check(self):
        assert parse_command(["check", "photos.sfv"]) == CheckCommand(manifest_path=Path("photos.sfv"))

    def test_home_directory_expanded(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))

        command = parse_command(["check", "~/photos.sfv"])

        assert command.manifest_path == tmp_path / "photos.sfv"

    def test_unknown_command(self):
        with pytest.raises(CommandError, match="Unsupported command: snapshot"):
            parse_command(["snapshot"])

    def test_wrong_argument_count(self):
        with pytest.raises(CommandError, match=r"syntax is: keeper record <src dir> <sfv filename>"):
            parse_command(["record", "photos"])

        with pytest.raises(CommandError, match=r"syntax is: keeper check <sfv filename>"):
            parse_command(["check", "a.sfv", "b.sfv"])

    def test_extra_arguments_rejected(self):
        with pytest.raises(CommandError):
            parse_command(["record", "a", "b", "c", "d"])

        with pytest.raises(CommandError):
            parse_command(["check"])

    def test_empty(self):
        with pytest.raises(CommandError):
            parse_command([])

    def test_line_number_in_message(self):
        with pytest.raises(CommandError) as exc_info:
            parse_command(["verify", "x.sfv"], line_number=7)

        assert "(line 7)" in exc_info.value.message
        assert exc_info.value.context["line_number"] == 7

    def test_known_commands_sorted(self):
        assert known_commands() == ["check", "record"]


class TestBatchFile:
    """Tests for batch instruction files."""

    def test_comments_and_blank_lines_skipped(self):
        lines = [
            "; nightly verification\n",
            "\n",
            "   \n",
            "check a.sfv\n",
            "  ; indented comment\n",
            "record photos photos.sfv\n",
        ]

        assert parse_batch_lines(lines) == [
            CheckCommand(manifest_path=Path("a.sfv")),
            RecordCommand(source_dir=Path("photos"), manifest_path=Path("photos.sfv")),
        ]

    def test_invalid_line_reports_line_number(self):
        with pytest.raises(CommandError, match=r"line 3"):
            parse_batch_lines(["check a.sfv\n", "\n", "frobnicate\n"])

    def test_read_from_disk(self, tmp_path):
        batch = tmp_path / "batch.txt"
        batch.write_text("; jobs\ncheck one.sfv\ncheck two.sfv\n", encoding="utf-8")

        assert [c.manifest_path for c in parse_batch_file(batch)] == [Path("one.sfv"), Path("two.sfv")]

    def test_missing_batch_file(self, tmp_path):
        with pytest.raises(CommandError, match="Cannot read batch file"):
            parse_batch_file(tmp_path / "missing.txt")


class TestRunCommand:
    """Tests for run_command() and run_commands()."""

    def test_record_then_check(self, sample_dir, expected_sfv):
        manifest = sample_dir / "data.sfv"

        assert run_command(RecordCommand(sample_dir, manifest), SfvConfig()) == EXIT_OK
        assert manifest.read_bytes() == expected_sfv
        assert run_command(CheckCommand(manifest), SfvConfig()) == EXIT_OK

    def test_check_failure(self, sample_dir, caplog):
        manifest = sample_dir / "data.sfv"
        run_command(RecordCommand(sample_dir, manifest), SfvConfig())
        (sample_dir / "0_byte_file").unlink()
        logger = logging.getLogger("test.commands")

        with caplog.at_level(logging.ERROR, logger="test.commands"):
            assert run_command(CheckCommand(manifest), SfvConfig(), logger) == EXIT_FAILURE

        messages = [r.getMessage() for r in caplog.records if r.name == "test.commands"]
        assert messages == ["Summary of errors encountered:", "file missing: 0_byte_file"]

    def test_record_failure(self, tmp_path):
        command = RecordCommand(tmp_path / "missing", tmp_path / "m.sfv")

        assert run_command(command, SfvConfig()) == EXIT_FAILURE

    def test_command_fields_attached_to_records(self, sample_dir, tmp_path, caplog):
        manifest = tmp_path / "data.sfv"
        logger = logging.getLogger("test.commands")

        with caplog.at_level(logging.INFO, logger="test.commands"):
            run_command(RecordCommand(sample_dir, manifest), SfvConfig(), logger)

        ours = [r for r in caplog.records if r.name == "test.commands"]
        assert ours
        assert all(r.extra_fields["command"] == "record" for r in ours)
        assert all(r.extra_fields["manifest"] == str(manifest) for r in ours)

    def test_unknown_command_type(self):
        with pytest.raises(TypeError):
            run_command("check a.sfv", SfvConfig())

    def test_run_commands_keeps_worst_exit_code(self, sample_dir, tmp_path):
        manifest = sample_dir / "data.sfv"
        commands = [
            RecordCommand(sample_dir, manifest),
            CheckCommand(tmp_path / "missing.sfv"),
            CheckCommand(manifest),
        ]

        assert run_commands(commands, SfvConfig()) == EXIT_FAILURE

    def test_run_commands_empty(self):
        assert run_commands([], SfvConfig()) == EXIT_OK
