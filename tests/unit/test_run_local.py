"""Unit tests for run_local module."""

import sys
import unittest
from unittest.mock import patch

import run_local


class TestRunLocal(unittest.TestCase):
    """Tests for run_local script."""

    @patch.object(sys, "argv", ["run_local.py"])
    @patch("run_local.execute_from_command_line")
    def test_main_calls_runlocal(self, mock_execute):
        """Test that main() calls the development server command."""
        run_local.main()

        mock_execute.assert_called_once_with(["run_local.py", "runlocal"])

    @patch.object(sys, "argv", ["run_local.py", "queue"])
    @patch("run_local.execute_from_command_line")
    def test_main_runs_queue(self, mock_execute):
        """Test that ``queue`` starts the delivery queue instead."""
        run_local.main()

        mock_execute.assert_called_once_with(["run_local.py", "run_queue"])


if __name__ == "__main__":
    unittest.main()
