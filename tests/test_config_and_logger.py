"""
Tests for settings loading and the audit logger.
"""

import json
import pytest
import tempfile
import os
from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import Settings, load_settings, parse_mode, CTIME_FORMAT
from core.errors import ConfigError, DirectoryAccessError, FileOperationError
from core.logger import AuditEntry, AuditLogger, ActionType, ActionStatus


class TestSettings:
    """Test Settings loading."""

    @pytest.fixture
    def temp_config(self):
        """Create a temporary config file."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("""fileman:
  audit_log: logs/custom.jsonl
  copy_chunk_size: 8192
  file_mode: "600"
  default_ordering: mtime
  unknown_key: ignored
""")
        yield f.name
        os.unlink(f.name)

    def test_defaults_when_missing(self, tmp_path):
        settings = load_settings(tmp_path / "absent.yaml")

        assert settings == Settings()
        assert settings.timestamp_format == CTIME_FORMAT
        assert settings.name_max_bytes == 255
        assert settings.file_mode == 0o644

    def test_values_from_file(self, temp_config):
        settings = load_settings(temp_config)

        assert settings.audit_log == "logs/custom.jsonl"
        assert settings.copy_chunk_size == 8192
        assert settings.file_mode == 0o600
        assert settings.default_ordering == "mtime"
        assert settings.read_chunk_size == 1024

    def test_unparsable_file_gives_defaults(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("fileman: [unclosed\n")

        assert load_settings(path) == Settings()

    def test_overrides(self, tmp_path):
        settings = load_settings(tmp_path / "absent.yaml", overrides={"read_chunk_size": 16})
        assert settings.read_chunk_size == 16

    def test_invalid_chunk_size(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("fileman:\n  copy_chunk_size: 0\n")

        with pytest.raises(ConfigError):
            load_settings(path)

    def test_invalid_ordering(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("fileman:\n  default_ordering: name\n")

        with pytest.raises(ConfigError):
            load_settings(path)

    def test_parse_mode(self):
        assert parse_mode("644") == 0o644
        assert parse_mode("0o755") == 0o755
        assert parse_mode("0600") == 0o600
        assert parse_mode(0o640) == 0o640

        with pytest.raises(ConfigError):
            parse_mode("rwx")


class TestErrors:
    """Test the error taxonomy."""

    def test_describe_uses_os_reason(self):
        cause = FileNotFoundError(2, "No such file or directory")
        error = DirectoryAccessError("Error opening directory", "/nope", cause)

        assert str(error) == "Error opening directory: No such file or directory"
        assert error.errno == 2
        assert error.target == "/nope"

    def test_without_cause(self):
        error = FileOperationError("Error copying file")

        assert error.errno is None
        assert error.reason == "unknown error"


class TestAuditLogger:
    """Test AuditLogger class."""

    @pytest.fixture
    def temp_log(self):
        """Create a temporary log file."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.jsonl', delete=False) as f:
            yield f.name
        os.unlink(f.name)

    @pytest.fixture
    def logger(self, temp_log):
        """Create a logger with temp file."""
        return AuditLogger(log_path=temp_log)

    def test_creates_missing_directory_on_first_write(self, tmp_path):
        logger = AuditLogger(log_path=str(tmp_path / "deep" / "dir" / "audit.jsonl"))
        assert not logger.log_path.exists()

        assert logger.log(AuditEntry.create(ActionType.CREATE, "first"))
        assert logger.log_path.exists()

    def test_log_path_is_a_directory(self, tmp_path, capsys):
        log_dir = tmp_path / "audit.jsonl"
        log_dir.mkdir()
        logger = AuditLogger(log_path=str(log_dir))

        entry = logger.log_action(action_type=ActionType.SORT, description="one")
        logger.log_action(action_type=ActionType.SORT, description="two")

        assert entry.action_description == "one"
        assert isinstance(logger.write_error, OSError)
        assert capsys.readouterr().err.count("is not writable") == 1
        assert logger.get_recent() == []

    def test_log_directory_cannot_be_created(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        logger = AuditLogger(log_path=str(blocker / "audit.jsonl"))

        assert not logger.log(AuditEntry.create(ActionType.CREATE, "lost"))
        assert logger.write_error is not None

    def test_log_action(self, logger):
        """Test logging an action."""
        entry = logger.log_action(
            action_type=ActionType.COPY,
            description="Copied a to b",
            target="a",
            status=ActionStatus.EXECUTED
        )

        assert entry.action_description == "Copied a to b"
        assert entry.status == "executed"
        assert entry.target == "a"

    def test_entries_are_json_lines(self, logger):
        logger.log_action(action_type=ActionType.CREATE, description="one")
        logger.log_action(action_type=ActionType.DELETE, description="two")

        lines = logger.log_path.read_text(encoding="utf-8").splitlines()

        assert [json.loads(line)["action_type"] for line in lines] == ["create", "delete"]

    def test_get_recent(self, logger):
        """Test getting recent entries."""
        for i in range(5):
            logger.log_action(action_type=ActionType.READ, description=f"Action {i}")

        entries = logger.get_recent(limit=3)

        assert [e.action_description for e in entries] == ["Action 4", "Action 3", "Action 2"]

    def test_skips_corrupt_lines(self, logger):
        logger.log_action(action_type=ActionType.READ, description="good")
        with open(logger.log_path, "a", encoding="utf-8") as f:
            f.write("not json\n")

        assert [e.action_description for e in logger.get_recent()] == ["good"]

    def test_get_by_action_type(self, logger):
        logger.log_action(action_type=ActionType.SORT, description="sorted")
        logger.log_action(action_type=ActionType.LIST, description="listed")

        entries = logger.get_by_action_type(ActionType.SORT)

        assert [e.action_description for e in entries] == ["sorted"]

    def test_get_failed_actions(self, logger):
        """Test getting failed operations."""
        logger.log_action(
            action_type=ActionType.DELETE,
            description="Error deleting file",
            target="missing.txt",
            status=ActionStatus.FAILED
        )
        logger.log_action(action_type=ActionType.CREATE, description="Created file")

        failed = logger.get_failed_actions()

        assert len(failed) == 1
        assert failed[0].target == "missing.txt"

    def test_export_csv(self, logger):
        logger.log_action(action_type=ActionType.STAT, description="Read attributes", target="x")

        lines = logger.export(format="csv").splitlines()

        assert lines[0] == "timestamp,action_type,action_description,target,status,result"
        assert '"stat","Read attributes","x","executed",""' in lines[1]

    def test_export_csv_doubles_quotes(self, logger):
        logger.log_action(action_type=ActionType.COPY, description='Copied "a" to b', target='say "hi".txt')

        row = logger.export(format="csv").splitlines()[1]

        assert '"Copied ""a"" to b","say ""hi"".txt"' in row

    def test_export_unknown_format(self, logger):
        with pytest.raises(ValueError):
            logger.export(format="xml")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
