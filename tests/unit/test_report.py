import csv
import io
import os
import tempfile

from dm32read import channel
from dm32read import errors
from dm32read import memmap
from dm32read import report
from dm32read.drivers import dm32
from tests import dm32_simulator
from tests.unit import base

CHANNEL_EXPORT = """No.,Channel Name,Receive Frequency,Transmit Frequency
1,Local Rptr,443.58750,448.58750
2,Simplex,145.23750,145.23750
"""


class TestZones(base.BaseTest):
    def test_looks_like_zone(self):
        self.assertTrue(report.looks_like_zone('Richmond'))
        self.assertTrue(report.looks_like_zone('Henrico 2'))
        self.assertTrue(report.looks_like_zone('Short-Pump'))
        self.assertFalse(report.looks_like_zone('Ri'))
        self.assertFalse(report.looks_like_zone('richmond'))
        self.assertFalse(report.looks_like_zone('ALLCAPS'))
        self.assertFalse(report.looks_like_zone('Under_score'))
        self.assertFalse(report.looks_like_zone('1234'))
        self.assertFalse(report.looks_like_zone('A' + 'b' * 24))

    def test_find_zones(self):
        zones = report.find_zones(dm32_simulator.make_image(),
                                  dm32.BLOCKS)
        names = [z.name for z in zones]
        self.assertEqual(report.Zone(0x1000, 'Richmond'), zones[0])
        self.assertEqual(report.Zone(0x100A, 'Henrico 2'), zones[1])
        self.assertEqual(1, names.count('Richmond'))
        self.assertIn('Local Rptr', names)

    def test_find_zones_limit(self):
        zones = report.find_zones(dm32_simulator.make_image(),
                                  dm32.BLOCKS, limit=1)
        self.assertEqual(['Richmond'], [z.name for z in zones])

    def test_find_zones_uncaptured(self):
        self.assertEqual([], report.find_zones(memmap.MemoryImage(),
                                               dm32.BLOCKS))

    def test_clean_zones(self):
        zones = [report.Zone(0x1000, 'Richmond'),
                 report.Zone(0x6020, 'Local Rptr'),
                 report.Zone(0x1100, 'Averyveryverylongname')]
        self.assertEqual([report.Zone(0x1000, 'Richmond')],
                         report.clean_zones(zones))


class TestFormatting(base.BaseTest):
    def setUp(self):
        super().setUp()
        self.image = dm32_simulator.make_image()
        self.channels = list(
            channel.ChannelSlotDecoder(self.image).scan())

    def test_tx_column(self):
        self.assertEqual('+5', report.tx_column(443.5875, 448.5875))
        self.assertEqual('-5', report.tx_column(448.5875, 443.5875))
        self.assertEqual('-0.6', report.tx_column(146.94, 146.34))
        self.assertEqual('+0.6', report.tx_column(145.0, 145.6))
        self.assertEqual('146.52000', report.tx_column(146.52, 146.52))

    def test_channel_fields(self):
        index, ch = self.channels[0]
        fields = report.channel_fields(index, ch)
        self.assertEqual(0, fields['slot'])
        self.assertEqual('00601C', fields['offset_hex'])
        self.assertEqual('443.58750', fields['rx_mhz'])
        self.assertEqual('448.58750', fields['tx_mhz'])
        self.assertEqual('High', fields['power'])
        self.assertEqual('14 00 00 00 30 01 00 81 00 00 FF FF FF FF 01 00',
                         fields['params_hex16'])

    def test_summarize_region(self):
        summary = report.summarize_region(self.image, 0x1000, 0x40)
        self.assertEqual(4, summary.strings)
        self.assertEqual(['Richmond', 'Henrico 2'], summary.samples)
        self.assertEqual('', summary.hint)
        summary = report.summarize_region(self.image, 0x1015, 0x40)
        self.assertEqual('contacts?', summary.hint)

    def test_summarize_uncaptured(self):
        summary = report.summarize_region(self.image, 0x8000, 0x1000)
        self.assertEqual((0, 0, 0), (summary.nonff, summary.non00,
                                     summary.strings))

    def test_print_config_quiet(self):
        out = io.StringIO()
        report.print_config(out, 'Baofeng DM-32', self.image, dm32.BLOCKS,
                            self.channels)
        self.assertEqual('', out.getvalue())

    def test_print_config(self):
        out = io.StringIO()
        report.print_config(out, 'Baofeng DM-32', self.image, dm32.BLOCKS,
                            self.channels, verbose=True)
        text = out.getvalue()
        self.assertIn('Radio: Baofeng DM-32', text)
        self.assertIn('0x001000..0x001FFF size=4096', text)
        self.assertIn('Local_Rptr', text)
        self.assertIn('# Table of analog channels.', text)
        self.assertIn('   1    Richmond', text)
        rows = [line for line in text.splitlines()
                if line.startswith('    2   ')]
        self.assertEqual(1, len(rows))
        self.assertIn('Simplex', rows[0])
        self.assertIn('145.23', rows[0])


class TestCSVFiles(base.BaseTest):
    def test_write_csv_files(self):
        image = dm32_simulator.make_image()
        decoder = channel.ChannelSlotDecoder(image)
        channels = list(decoder.scan())
        with tempfile.TemporaryDirectory() as d:
            paths = report.write_csv_files(d, image, dm32.BLOCKS, decoder,
                                           channels)
            for path in paths.values():
                self.assertTrue(os.path.exists(path))

            with open(paths['channels'], newline='') as f:
                rows = list(csv.reader(f))
            self.assertEqual([['offset_hex', 'name'],
                              ['00601C', 'Local Rptr'],
                              ['00604C', 'Simplex']], rows)

            with open(paths['fields'], newline='') as f:
                rows = list(csv.DictReader(f))
            self.assertEqual('145.23750', rows[1]['tx_mhz'])
            self.assertEqual('1', rows[1]['timeslot'])

            with open(paths['zones'], newline='') as f:
                rows = list(csv.reader(f))
            self.assertIn(['001000', 'Richmond'], rows)

            with open(paths['slots'], newline='') as f:
                rows = list(csv.DictReader(f))
            self.assertEqual('Local Rptr', rows[0]['label'])
            self.assertEqual('443.58750', rows[0]['rx_bcd_mhz'])
            self.assertEqual('448.58750', rows[0]['tx_bcd_mhz'])
            self.assertEqual(2, len(rows))


class TestValidateExport(base.BaseTest):
    def test_zones_ok(self):
        result = report.validate_export(
            io.StringIO(dm32_simulator.ZONE_EXPORT),
            ['Richmond', 'Henrico 2'], ['Local Rptr', 'Simplex'])
        self.assertEqual(('zones', 2, []), result)

    def test_zones_missing(self):
        result = report.validate_export(
            io.StringIO(dm32_simulator.ZONE_EXPORT),
            ['Richmond'], ['Local Rptr'])
        self.assertEqual([('channel', 'Simplex'), ('zone', 'Henrico 2')],
                         result.missing)

    def test_channels(self):
        result = report.validate_export(io.StringIO(CHANNEL_EXPORT), [],
                                        ['Local Rptr'])
        self.assertEqual('channels', result.kind)
        self.assertEqual(2, result.checked)
        self.assertEqual([('channel', 'Simplex')], result.missing)

    def test_blank_rows_skipped(self):
        export = CHANNEL_EXPORT + ',,,\n\n'
        result = report.validate_export(io.StringIO(export), [],
                                        ['Local Rptr', 'Simplex'])
        self.assertEqual(2, result.checked)

    def test_empty(self):
        self.assertRaises(errors.InvalidDataError, report.validate_export,
                          io.StringIO(''), [], [])

    def test_unsupported(self):
        self.assertRaises(errors.InvalidDataError, report.validate_export,
                          io.StringIO('Location,Frequency\n1,146.52\n'),
                          [], [])
