"""
Tests for py2fmod data models.
"""

import unittest
from datetime import datetime
from unittest.mock import Mock

from py2fmod.core.errors import ErrorCodes
from py2fmod.models.connection import (
    ConnectionConfig,
    ConnectionModel,
    ConnectionState,
    ConnectionStatus,
)
from py2fmod.models.file_group import FileGroup, InstrumentType, SuffixRules
from py2fmod.models.import_result import ImportRejection, ImportResult
from py2fmod.models.settings import ImporterSettings


class TestConnectionConfig(unittest.TestCase):
    """Test ConnectionConfig validation."""

    def test_defaults_are_valid(self):
        config = ConnectionConfig()
        self.assertEqual((config.host, config.port), ("127.0.0.1", 3663))
        self.assertEqual(config.validate(), (True, []))

    def test_hostname_is_allowed(self):
        valid, _ = ConnectionConfig("studio-pc.local", 3663).validate()
        self.assertTrue(valid)

    def test_invalid_values(self):
        for config in (
            ConnectionConfig("", 3663),
            ConnectionConfig("127.0.0.1", 0),
            ConnectionConfig("127.0.0.1", 65536),
            ConnectionConfig("127.0.0.1", True),
            ConnectionConfig("127.0.0.1", 3663, timeout=0),
        ):
            valid, errors = config.validate()
            self.assertFalse(valid, config)
            self.assertEqual(len(errors), 1)

    def test_config_is_frozen(self):
        config = ConnectionConfig()
        with self.assertRaises(Exception):
            config.port = 1


class TestConnectionStatus(unittest.TestCase):
    """Test ConnectionStatus derived properties."""

    def test_project_name_windows_path(self):
        status = ConnectionStatus(ConnectionState.CONNECTED, project_path="C:\\proj\\MyGame.fspro")
        self.assertEqual(status.project_name, "MyGame")

    def test_project_name_forward_slash_drive_path(self):
        status = ConnectionStatus(ConnectionState.CONNECTED, project_path="C:/proj/MyGame.fspro")
        self.assertEqual(status.project_name, "MyGame")

    def test_project_name_posix_path(self):
        status = ConnectionStatus(ConnectionState.CONNECTED, project_path="/Users/me/Space Game.fspro")
        self.assertEqual(status.project_name, "Space Game")

    def test_no_project(self):
        status = ConnectionStatus(ConnectionState.CONNECTED)
        self.assertIsNone(status.project_name)
        self.assertFalse(status.has_project)
        self.assertTrue(status.is_connected)

    def test_importing_counts_as_connected(self):
        self.assertTrue(ConnectionStatus(ConnectionState.IMPORTING).is_connected)
        self.assertFalse(ConnectionStatus(ConnectionState.CONNECTING).is_connected)

    def test_with_state_keeps_other_fields(self):
        now = datetime.now()
        status = ConnectionStatus(ConnectionState.CONNECTED, host="h", port=1, connected_at=now)
        importing = status.with_state(ConnectionState.IMPORTING)

        self.assertEqual(importing.state, ConnectionState.IMPORTING)
        self.assertEqual(importing.host, "h")
        self.assertEqual(importing.connected_at, now)
        self.assertEqual(status.state, ConnectionState.CONNECTED)


class TestConnectionModel(unittest.TestCase):
    """Test the observable connection model."""

    def setUp(self):
        self.model = ConnectionModel()

    def test_starts_disconnected(self):
        self.assertEqual(self.model.state, ConnectionState.DISCONNECTED)

    def test_observers_are_notified(self):
        observer = Mock()
        self.model.add_observer(observer)

        status = ConnectionStatus(ConnectionState.CONNECTING)
        self.model.status = status

        observer.assert_called_once_with(status)

    def test_observer_registered_once(self):
        observer = Mock()
        self.model.add_observer(observer)
        self.model.add_observer(observer)
        self.model.status = ConnectionStatus(ConnectionState.CONNECTING)
        self.assertEqual(observer.call_count, 1)

    def test_removed_observer_not_notified(self):
        observer = Mock()
        self.model.add_observer(observer)
        self.model.remove_observer(observer)
        self.model.remove_observer(observer)

        self.model.status = ConnectionStatus(ConnectionState.CONNECTING)
        observer.assert_not_called()

    def test_failing_observer_is_logged_and_skipped(self):
        """Test that one raising observer neither blocks the update nor later observers."""
        broken = Mock(side_effect=RuntimeError("observer bug"))
        observer = Mock()
        self.model.add_observer(broken)
        self.model.add_observer(observer)

        status = ConnectionStatus(ConnectionState.IMPORTING)
        with self.assertLogs('py2fmod.models.connection', level='ERROR'):
            self.model.status = status

        self.assertEqual(self.model.state, ConnectionState.IMPORTING)
        observer.assert_called_once_with(status)


class TestFileGroup(unittest.TestCase):

    def test_group_key_and_event_path(self):
        group = FileGroup("kick", InstrumentType.MULTI, "Drums/Acoustic")
        self.assertEqual(group.group_key, "Drums/Acoustic_kick_Multi")
        self.assertEqual(group.event_path, "Drums/Acoustic/kick")

    def test_root_level_group(self):
        group = FileGroup("door", InstrumentType.SINGLE)
        self.assertEqual(group.group_key, "_door_Single")
        self.assertEqual(group.event_path, "door")
        self.assertEqual(group.file_paths, [])

    def test_instrument_type_str_is_name(self):
        self.assertEqual(str(InstrumentType.SCATTERER), "Scatterer")


class TestImporterSettings(unittest.TestCase):
    """Test ImporterSettings."""

    def test_defaults(self):
        settings = ImporterSettings()
        self.assertEqual(settings.suffix_rules(), SuffixRules("_m", "_c", "_s"))
        self.assertEqual(settings.to_connection_config(), ConnectionConfig("127.0.0.1", 3663, 10.0))
        self.assertEqual(settings.validate(), (True, []))

    def test_none_suffix_becomes_empty(self):
        settings = ImporterSettings(spatializer_suffix=None)
        self.assertEqual(settings.suffix_rules().spatializer, "")

    def test_equal_multi_and_scatterer_suffix_is_invalid(self):
        valid, errors = ImporterSettings(multi_suffix="_X", scatterer_suffix="_x").validate()
        self.assertFalse(valid)
        self.assertIn("differ", errors[0])

    def test_round_trip_through_dict(self):
        settings = ImporterSettings(host="10.0.0.2", port=4000, multi_suffix="-m", template_dir="scripts")
        self.assertEqual(ImporterSettings.from_dict(settings.to_dict()), settings)

    def test_from_dict_ignores_unknown_and_coerces(self):
        settings = ImporterSettings.from_dict({'port': "4000", 'connect_timeout': "2", 'theme': "dark"})
        self.assertEqual(settings.port, 4000)
        self.assertEqual(settings.connect_timeout, 2.0)

    def test_from_dict_none(self):
        self.assertEqual(ImporterSettings.from_dict(None), ImporterSettings())


class TestImportResult(unittest.TestCase):

    def test_rejected(self):
        result = ImportResult.rejected(ImportRejection.INVALID_FOLDER)
        self.assertFalse(result.success)
        self.assertEqual(result.rejection.status_text, "Error: Invalid folder")
        self.assertEqual(result.groups_created, 0)

    def test_groups_created(self):
        result = ImportResult(success=True, group_keys=["a", "b"])
        self.assertEqual(result.groups_created, 2)

    def test_rejection_error_codes(self):
        self.assertEqual(ImportRejection.BUSY.error_code, ErrorCodes.OPERATION_IN_PROGRESS)
        self.assertEqual(ImportRejection.NOT_CONNECTED.error_code, ErrorCodes.NOT_CONNECTED)
        self.assertEqual(ImportRejection.TEMPLATES_MISSING.error_code, ErrorCodes.TEMPLATE_MISSING)
        self.assertEqual(ImportRejection.INVALID_FOLDER.error_code, ErrorCodes.INVALID_FOLDER)


if __name__ == '__main__':
    unittest.main()
