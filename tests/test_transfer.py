"""Unit tests for scp transfers."""

import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from pushit.exceptions import MultiError, TransferError
from pushit.mapping.engine import TransferItem
from pushit.output import OutputFormatter
from pushit.transfer import ScpTransfer, run_transfers


@pytest.fixture
def mock_output():
    """Create a mock output formatter."""
    output = Mock(spec=OutputFormatter)
    output.quiet = False
    return output


class TestScpTransfer:
    """Tests for ScpTransfer."""

    def test_command_for_file(self):
        """Test the scp command for a single file."""
        transfer = ScpTransfer("root@hn", Path("/src/app"))
        item = TransferItem("lib/x.js", "/opt/app/lib/x.js")
        assert transfer.command(item) == [
            "scp",
            "/src/app/lib/x.js",
            "root@hn:/opt/app/lib/x.js",
        ]

    def test_command_for_directory(self):
        """Test directories are copied recursively."""
        transfer = ScpTransfer("root@hn", "/src/app")
        item = TransferItem("lib", "/opt/app", recursive=True)
        assert transfer.command(item) == [
            "scp",
            "-r",
            "/src/app/lib",
            "root@hn:/opt/app",
        ]

    @patch("pushit.transfer.subprocess.run")
    def test_dry_run_prints_only(self, mock_run, mock_output):
        """Test dry run prints the command without running it."""
        transfer = ScpTransfer("root@hn", "/src/app", output=mock_output, dry_run=True)
        transfer.copy(TransferItem("lib/x.js", "/opt/app/lib/x.js"))

        mock_run.assert_not_called()
        mock_output.print.assert_called_once_with(
            "# scp /src/app/lib/x.js root@hn:/opt/app/lib/x.js"
        )

    @patch("pushit.transfer.subprocess.run")
    def test_copy_runs_scp(self, mock_run, mock_output):
        """Test a real copy runs scp."""
        mock_run.return_value = subprocess.CompletedProcess(
            args=[], returncode=0, stdout="", stderr=""
        )
        transfer = ScpTransfer("root@hn", "/src/app", output=mock_output)
        transfer.copy(TransferItem("lib/x.js", "/opt/app/lib/x.js"))

        assert mock_run.call_args[0][0] == [
            "scp",
            "/src/app/lib/x.js",
            "root@hn:/opt/app/lib/x.js",
        ]

    @patch("pushit.transfer.subprocess.run")
    def test_copy_failure(self, mock_run, mock_output):
        """Test a failing scp raises TransferError."""
        mock_run.return_value = subprocess.CompletedProcess(
            args=[], returncode=1, stdout="", stderr="No such file or directory"
        )
        transfer = ScpTransfer("root@hn", "/src/app", output=mock_output)

        with pytest.raises(TransferError, match="No such file") as exc_info:
            transfer.copy(TransferItem("lib/x.js", "/opt/app/lib/x.js"))
        assert exc_info.value.path == "lib/x.js"


class TestRunTransfers:
    """Tests for run_transfers."""

    def test_all_copied(self):
        """Test every item is copied."""
        transfer = Mock()
        items = [TransferItem("a", "/a"), TransferItem("b", "/b")]

        assert run_transfers(items, transfer, max_workers=2) == 2
        assert transfer.copy.call_count == 2

    def test_failures_aggregated(self):
        """Test every failed copy is reported and others still run."""

        def copy(item):
            if item.source != "ok":
                raise TransferError(item.source, RuntimeError("boom"))

        transfer = Mock()
        transfer.copy.side_effect = copy
        items = [TransferItem("b", "/b"), TransferItem("ok", "/ok"), TransferItem("a", "/a")]

        with pytest.raises(MultiError) as exc_info:
            run_transfers(items, transfer)

        assert [e.path for e in exc_info.value.errors] == ["a", "b"]
        assert transfer.copy.call_count == 3

    def test_unexpected_errors_wrapped(self):
        """Test non-pushit errors are wrapped in TransferError."""
        transfer = Mock()
        transfer.copy.side_effect = OSError("disk on fire")

        with pytest.raises(MultiError) as exc_info:
            run_transfers([TransferItem("a", "/a")], transfer)

        error = exc_info.value.errors[0]
        assert isinstance(error, TransferError)
        assert "disk on fire" in str(error)
