from unittest import mock

from dm32read import directory
from dm32read import radio_common
from tests.unit import base


class TestStatus(base.BaseTest):
    def test_str(self):
        status = radio_common.Status()
        status.msg = 'Cloning from radio'
        status.max = 4
        status.cur = 2
        self.assertEqual('|=====     | 50.0% Cloning from radio', str(status))

    def test_str_no_max(self):
        status = radio_common.Status()
        status.max = 0
        self.assertEqual('|??????????| 0.0% Unknown', str(status))

    @mock.patch('sys.stdout')
    def test_console_status(self, mock_stdout):
        status = radio_common.Status()
        status.cur = status.max
        with mock.patch('dm32read.logger.is_visible', return_value=True):
            radio_common.console_status(status)
        self.assertEqual(2, mock_stdout.write.call_count)

    @mock.patch('sys.stdout')
    def test_console_status_quiet(self, mock_stdout):
        with mock.patch('dm32read.logger.is_visible', return_value=False):
            radio_common.console_status(radio_common.Status())
        mock_stdout.write.assert_not_called()


class TestRadio(base.BaseTest):
    def test_not_implemented(self):
        radio = radio_common.Radio(None)
        self.assertRaises(NotImplementedError, radio.sync_in)
        self.assertRaises(NotImplementedError, radio.sync_out)
        self.assertRaises(NotImplementedError, radio.get_channels)
        self.assertRaises(NotImplementedError, radio.verify_csv, None)

    def test_clone_mode_empty(self):
        radio = radio_common.CloneModeRadio(mock.sentinel.pipe)
        self.assertIs(mock.sentinel.pipe, radio.pipe)
        self.assertEqual(0, radio.get_mmap().high_water_mark)


class TestDirectory(base.BaseTest):
    def test_radio_class_id(self):
        class FakeRadio(radio_common.Radio):
            VENDOR = 'Acme'
            MODEL = 'DM-1 (Plus)'
            VARIANT = 'EU/UK'
        self.assertEqual('Acme_DM-1_Plus_EU_UK',
                         directory.radio_class_id(FakeRadio))

    def test_duplicate(self):
        class FakeRadio(radio_common.Radio):
            VENDOR = 'Acme'
            MODEL = 'Duplicate'
        with mock.patch.dict(directory.DRV_TO_RADIO):
            directory.register(FakeRadio)
            self.assertIs(FakeRadio, directory.get_radio('Acme_Duplicate'))
            self.assertRaises(Exception, directory.register, FakeRadio)
        self.assertRaises(Exception, directory.get_radio, 'Acme_Duplicate')
