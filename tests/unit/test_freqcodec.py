from dm32read import freqcodec
from tests.unit import base


class TestBCD(base.BaseTest):
    def test_decode(self):
        self.assertAlmostEqual(443.5875,
                               freqcodec.decode_bcd(b'\x50\x87\x35\x44'),
                               delta=1e-5)
        self.assertAlmostEqual(146.52,
                               freqcodec.decode_bcd(b'\x00\x20\x65\x14'),
                               delta=1e-5)

    def test_encode(self):
        self.assertEqual(b'\x50\x87\x35\x44', freqcodec.encode_bcd(443.5875))
        self.assertEqual(b'\x00\x00\x00\x00', freqcodec.encode_bcd(0))
        self.assertRaises(ValueError, freqcodec.encode_bcd, 1000.0)
        self.assertRaises(ValueError, freqcodec.encode_bcd, -1.0)

    def test_round_trip(self):
        for mhz in (144.39, 145.2375, 438.5, 446.00625, 462.5625):
            self.assertAlmostEqual(
                mhz, freqcodec.decode_bcd(freqcodec.encode_bcd(mhz)),
                delta=1e-5)

    def test_invalid_nibble(self):
        self.assertIsNone(freqcodec.decode_bcd(b'\x5A\x87\x35\x44'))
        self.assertIsNone(freqcodec.decode_bcd(b'\x50\x87\x35\xF4'))
        self.assertIsNone(freqcodec.decode_bcd(b'\xFF\xFF\xFF\xFF'))

    def test_decode_forward(self):
        self.assertAlmostEqual(443.5875,
                               freqcodec.decode_bcd_forward(
                                   b'\x44\x35\x87\x50'),
                               delta=1e-5)
        self.assertIsNone(freqcodec.decode_bcd_forward(b'\x0A\x00\x00\x00'))


class TestFloat(base.BaseTest):
    def test_decode_float32(self):
        # 446.5 as little-endian float32
        self.assertAlmostEqual(446.5,
                               freqcodec.decode_float32(b'\x00\x40\xDF\x43'),
                               delta=1e-3)

    def test_decode_float32_out_of_range(self):
        # -1.0
        self.assertIsNone(freqcodec.decode_float32(b'\x00\x00\x80\xBF'))
        # NaN
        self.assertIsNone(freqcodec.decode_float32(b'\x00\x00\xC0\x7F'))
        # 4000.0
        self.assertIsNone(freqcodec.decode_float32(b'\x00\x00\x7A\x45'))


class TestDecodeFrequency(base.BaseTest):
    def test_plausible(self):
        self.assertTrue(freqcodec.is_plausible(30.0))
        self.assertTrue(freqcodec.is_plausible(1000.0))
        self.assertFalse(freqcodec.is_plausible(1000.1))
        self.assertFalse(freqcodec.is_plausible(None))

    def test_band_score(self):
        self.assertEqual(2.5, freqcodec.band_score(145.0))
        self.assertEqual(0.0, freqcodec.band_score(508.73544))
        self.assertEqual(0.5, freqcodec.band_score(462.5625))

    def test_reversed_only(self):
        self.assertAlmostEqual(146.52,
                               freqcodec.decode_frequency(
                                   b'\x00\x20\x65\x14'),
                               delta=1e-5)

    def test_forward_only(self):
        # Reversed is far below any band
        self.assertAlmostEqual(145.0,
                               freqcodec.decode_frequency(
                                   b'\x14\x50\x00\x00'),
                               delta=1e-5)

    def test_both_plausible_prefers_band(self):
        # Reversed is 443.5875, forward 508.73544
        self.assertAlmostEqual(443.5875,
                               freqcodec.decode_frequency(
                                   b'\x50\x87\x35\x44'),
                               delta=1e-5)
        # Reversed is 508.73544, forward 443.5875
        self.assertAlmostEqual(443.5875,
                               freqcodec.decode_frequency(
                                   b'\x44\x35\x87\x50'),
                               delta=1e-5)

    def test_fallback_to_hint(self):
        self.assertEqual(146.52,
                         freqcodec.decode_frequency(b'\xFF\xFF\xFF\xFF',
                                                    rx_hint=146.52))
        self.assertEqual(0.0,
                         freqcodec.decode_frequency(b'\xFF\xFF\xFF\xFF'))
        self.assertEqual(0.0,
                         freqcodec.decode_frequency(b'\x00\x00\x00\x00',
                                                    rx_hint=10.0))
