from dm32read import util
from tests.unit import base


class TestUtils(base.BaseTest):
    def test_hexprint_with_bytes(self):
        util.hexprint(b'00000000000000')

    def test_hexprint_short(self):
        expected = ('000000: 00 00 00 00 00 00 00 00   ........\n'
                    '000008: 00                        ........\n')
        self.assertEqual(expected, util.hexprint(b'\x00' * 9))

    def test_hexprint_even(self):
        expected = '000000: 00 00 00 00 00 00 00 00   ........\n'
        self.assertEqual(expected, util.hexprint(b'\x00' * 8))

    def test_hexprint_base(self):
        expected = '00601C: 4c 6f 63 61 6c 00 ff ff   Local...\n'
        self.assertEqual(expected, util.hexprint(b'Local\x00\xFF\xFF',
                                                 base=0x601C))

    def test_hexstr(self):
        self.assertEqual('52 00 60 0C', util.hexstr(b'\x52\x00\x60\x0C'))
        self.assertEqual('5200', util.hexstr(b'\x52\x00', sep=''))
        self.assertEqual('', util.hexstr(b''))

    def test_ascii_runs(self):
        data = b'\xFFRichmond\x00ab\x00Henrico 2'
        self.assertEqual([(0x1001, 'Richmond'), (0x100A, 'ab'),
                          (0x100D, 'Henrico 2')],
                         list(util.ascii_runs(data, 0x1000)))
        self.assertEqual([(1, 'Richmond'), (13, 'Henrico 2')],
                         list(util.ascii_runs(data, minlen=3)))

    def test_ascii_runs_split(self):
        self.assertEqual([(0, 'AAAA'), (4, 'AA')],
                         list(util.ascii_runs(b'A' * 6, maxlen=4)))
