"""Tests for the keeper command line."""

import json
import logging
import os

import pytest

from keeper.cli import apply_overrides, build_parser, main
from keeper.common import ConfigLoader
from keeper.sfv import KeeperConfig, read_manifest


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep user/system config and KEEPER_* variables out of the tests."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        "keeper.common.config.platformdirs.user_config_dir",
        lambda appname=None, appauthor=None: str(tmp_path / "user_config"),
    )
    monkeypatch.setattr(ConfigLoader, "_load_system_config", lambda self: None)
    for key in list(os.environ):
        if key.startswith("KEEPER_"):
            monkeypatch.delenv(key)

    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestMain:
    """Tests for main()."""

    def test_record_then_check(self, sample_dir, expected_sfv):
        manifest = sample_dir / "data.sfv"

        assert main(["record", str(sample_dir), str(manifest)]) == 0
        assert manifest.read_bytes() == expected_sfv
        assert main(["check", str(manifest)]) == 0

    def test_check_detects_corruption(self, sample_dir):
        manifest = sample_dir / "data.sfv"
        main(["record", str(sample_dir), str(manifest)])
        (sample_dir / "hello_world_file_nl").write_bytes(b"Goodbye\n")

        assert main(["check", str(manifest)]) == 1

    def test_no_arguments(self):
        assert main([]) == 2

    def test_unknown_command(self):
        assert main(["snapshot", "somewhere"]) == 2

    def test_wrong_argument_count(self, tmp_path):
        assert main(["record", str(tmp_path)]) == 2
        assert main(["record", str(tmp_path), "a.sfv", "b.sfv", "c.sfv"]) == 2
        assert main(["check", "a.sfv", "b.sfv"]) == 2

    def test_batch_file(self, sample_dir, tmp_path):
        manifest = sample_dir / "data.sfv"
        batch = tmp_path / "jobs.txt"
        batch.write_text(
            f"; nightly\n\nrecord {sample_dir} {manifest}\ncheck {manifest}\n",
            encoding="utf-8",
        )

        assert main(["-F", str(batch)]) == 0
        assert len(read_manifest(manifest).records) == 10

    def test_batch_file_runs_before_command_line(self, sample_dir, tmp_path):
        manifest = sample_dir / "data.sfv"
        batch = tmp_path / "jobs.txt"
        batch.write_text(f"record {sample_dir} {manifest}\n", encoding="utf-8")

        assert main(["-F", str(batch), "check", str(manifest)]) == 0

    def test_invalid_batch_file_runs_nothing(self, sample_dir, tmp_path):
        manifest = tmp_path / "data.sfv"
        batch = tmp_path / "jobs.txt"
        batch.write_text(f"record {sample_dir} {manifest}\nbogus\n", encoding="utf-8")

        assert main(["-F", str(batch)]) == 2
        assert not manifest.exists()

    def test_missing_batch_file(self, tmp_path):
        assert main(["-F", str(tmp_path / "missing.txt")]) == 2

    def test_recursive_flag(self, tmp_path):
        source = tmp_path / "src"
        (source / "sub").mkdir(parents=True)
        (source / "sub" / "inner.txt").write_bytes(b"inner")
        manifest = tmp_path / "m.sfv"

        assert main(["--recursive", "record", str(source), str(manifest)]) == 0
        assert [r.path for r in read_manifest(manifest).records] == ["sub/inner.txt"]

    def test_report_extra_flag(self, sample_dir):
        manifest = sample_dir / "data.sfv"
        main(["record", str(sample_dir), str(manifest)])
        (sample_dir / "late_arrival").write_bytes(b"late")

        assert main(["check", str(manifest)]) == 0
        assert main(["--report-extra", "check", str(manifest)]) == 1

    def test_broken_config_file(self, tmp_path):
        config = tmp_path / "broken.toml"
        config.write_text("[sfv\nbuffer_size = ", encoding="utf-8")

        assert main(["--config", str(config), "check", "x.sfv"]) == 2

    def test_invalid_config_value(self, tmp_path):
        config = tmp_path / "bad.toml"
        config.write_text("[sfv]\nbuffer_size = 0\n", encoding="utf-8")

        assert main(["--config", str(config), "check", "x.sfv"]) == 2

    def test_invalid_workers_override(self, tmp_path):
        assert main(["--workers", "0", "check", str(tmp_path / "x.sfv")]) == 2

    def test_config_file_tool_identifier(self, sample_dir, tmp_path):
        config = tmp_path / "keeper.toml"
        config.write_text('[sfv]\ntool_identifier = "nightly-backup"\n', encoding="utf-8")
        manifest = tmp_path / "data.sfv"

        assert main(["--config", str(config), "record", str(sample_dir), str(manifest)]) == 0
        assert manifest.read_text().startswith("; Generated by nightly-backup\n")

    def test_log_file_is_json(self, sample_dir, tmp_path):
        manifest = tmp_path / "data.sfv"
        log_file = tmp_path / "logs" / "keeper.log"

        assert main(["--log-file", str(log_file), "record", str(sample_dir), str(manifest)]) == 0

        entries = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
        assert any("Recorded 10 file(s)" in entry["message"] for entry in entries)
        assert all(entry.get("command") == "record" for entry in entries if entry["message"].startswith("Running"))


class TestOverrides:
    """Tests for command line overrides."""

    def test_flags_override_config(self):
        args = build_parser().parse_args(
            ["--log-level", "debug", "--workers", "3", "--recursive", "--report-extra", "check", "a.sfv"]
        )

        config = apply_overrides(KeeperConfig(), args)

        assert config.logging.level == "DEBUG"
        assert config.sfv.workers == 3
        assert config.sfv.recursive is True
        assert config.sfv.report_extra_files is True

    def test_no_flags_keep_config(self):
        base = KeeperConfig(**{"sfv": {"workers": 5}})
        args = build_parser().parse_args(["check", "a.sfv"])

        assert apply_overrides(base, args) == base

    def test_invalid_log_level_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-level", "chatty", "check", "a.sfv"])
