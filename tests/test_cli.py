"""
Tests for the command-line interface.
"""

import logging
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from py2fmod import cli
from py2fmod.core.errors import ConfigurationError
from py2fmod.models.import_result import ImportResult


class TestParseArgs(unittest.TestCase):
    """Test argument parsing."""

    def test_defaults(self):
        args = cli.parse_args([])

        self.assertIsNone(args.folder)
        self.assertIsNone(args.host)
        self.assertIsNone(args.port)
        self.assertEqual(args.log_level, "INFO")

    def test_all_options(self):
        args = cli.parse_args([
            "--host", "10.0.0.2", "--port", "4000", "--settings", "s.yaml",
            "--templates", "scripts", "--multi-suffix", "_x", "--scatterer-suffix", "_y",
            "--spatializer-suffix", "_z", "--log-level", "DEBUG", "--log-file", "run.log", "audio"
        ])

        self.assertEqual(args.folder, "audio")
        self.assertEqual(args.port, 4000)
        self.assertEqual(args.multi_suffix, "_x")
        self.assertEqual(args.spatializer_suffix, "_z")
        self.assertEqual(args.log_file, "run.log")

    def test_invalid_log_level_exits(self):
        with self.assertRaises(SystemExit):
            with patch('sys.stderr'):
                cli.parse_args(["--log-level", "LOUD"])


class TestValidateArgs(unittest.TestCase):
    """Test argument validation."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    @patch('builtins.print')
    def test_port_out_of_range(self, mock_print):
        self.assertFalse(cli.validate_args(cli.parse_args(["--port", "70000"])))
        mock_print.assert_called_once()

    @patch('builtins.print')
    def test_empty_host(self, mock_print):
        self.assertFalse(cli.validate_args(cli.parse_args(["--host", "  "])))

    @patch('builtins.print')
    def test_missing_folder(self, mock_print):
        missing = str(Path(self.temp_dir) / "missing")
        self.assertFalse(cli.validate_args(cli.parse_args([missing])))

    @patch('builtins.print')
    def test_missing_template_dir(self, mock_print):
        missing = str(Path(self.temp_dir) / "missing")
        self.assertFalse(cli.validate_args(cli.parse_args(["--templates", missing])))

    def test_valid_arguments(self):
        self.assertTrue(cli.validate_args(cli.parse_args(["--port", "3663", self.temp_dir])))


class TestBuildSettings(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_defaults_without_settings_file(self):
        settings = cli.build_settings(cli.parse_args([]))
        self.assertEqual((settings.host, settings.port), ("127.0.0.1", 3663))

    def test_cli_overrides_settings_file(self):
        path = self.temp_dir / "settings.yaml"
        path.write_text("host: 10.0.0.9\nport: 4000\nmulti_suffix: _multi\n", encoding='utf-8')

        settings = cli.build_settings(cli.parse_args(["--settings", str(path), "--port", "5000"]))

        self.assertEqual(settings.host, "10.0.0.9")
        self.assertEqual(settings.port, 5000)
        self.assertEqual(settings.multi_suffix, "_multi")


class TestSetupLogging(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.root = logging.getLogger()
        self.saved_handlers = list(self.root.handlers)

    def tearDown(self):
        for handler in list(self.root.handlers):
            if handler not in self.saved_handlers:
                self.root.removeHandler(handler)
                handler.close()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_log_file_receives_records(self):
        log_path = self.temp_dir / "importer.log"

        cli.setup_logging("INFO", str(log_path))
        logging.getLogger("py2fmod.test").warning("written to file")

        for handler in self.root.handlers:
            handler.flush()
        self.assertIn("written to file", log_path.read_text(encoding='utf-8'))


class TestMain(unittest.TestCase):
    """Test the main entry point with a mocked ImportService."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        patcher = patch('py2fmod.cli.ImportService')
        self.service_class = patcher.start()
        self.addCleanup(patcher.stop)
        logging_patcher = patch('py2fmod.cli.setup_logging')
        logging_patcher.start()
        self.addCleanup(logging_patcher.stop)

        self.service = MagicMock()
        self.service_class.return_value.__enter__.return_value = self.service

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_connect_only(self):
        self.service.connect.return_value = True

        self.assertEqual(cli.main([]), 0)
        self.service.import_folder.assert_not_called()

    def test_connect_failure_exit_code(self):
        self.service.connect.return_value = False
        self.assertEqual(cli.main([self.temp_dir]), 1)

    def test_import_success(self):
        self.service.connect.return_value = True
        self.service.import_folder.return_value = ImportResult(success=True)

        self.assertEqual(cli.main([self.temp_dir]), 0)
        self.service.import_folder.assert_called_once_with(self.temp_dir)

    def test_import_failure_exit_code(self):
        self.service.connect.return_value = True
        self.service.import_folder.return_value = ImportResult(success=False, error="lost")
        self.assertEqual(cli.main([self.temp_dir]), 1)

    @patch('builtins.print')
    def test_invalid_arguments_exit_code(self, mock_print):
        self.assertEqual(cli.main(["--port", "0"]), 1)
        self.service_class.assert_not_called()

    @patch('builtins.print')
    def test_invalid_settings_exit_code(self, mock_print):
        self.assertEqual(cli.main(["--multi-suffix", "_a", "--scatterer-suffix", "_A"]), 1)
        self.service_class.assert_not_called()

    @patch('builtins.print')
    def test_unexpected_error_exit_code(self, mock_print):
        self.service.connect.side_effect = RuntimeError("boom")
        self.assertEqual(cli.main([]), 1)
        mock_print.assert_called_with("An error occurred: boom")

    @patch('builtins.print')
    def test_fatal_importer_error_prints_suggestions(self, mock_print):
        self.service.connect.side_effect = ConfigurationError(
            "Template directory is unreadable",
            suggestions=["Check the --templates path"]
        )

        self.assertEqual(cli.main([]), 1)

        printed = mock_print.call_args[0][0]
        self.assertIn("Template directory is unreadable", printed)
        self.assertIn("1. Check the --templates path", printed)


if __name__ == '__main__':
    unittest.main()
