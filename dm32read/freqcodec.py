# Copyright 2025 dm32read contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""Frequency encodings found in DM-32 channel records

Frequencies are stored as four bytes of packed BCD counting 10 Hz steps.
The usual order puts the most significant digits in the last byte, so
443.58750 MHz (44358750) is stored as 50 87 35 44. Some records appear to
use the natural byte order instead, and float32 is checked as a weak
extra hint.
"""

import logging
import math
import struct

LOG = logging.getLogger(__name__)

PLAUSIBLE_LOW = 30.0
PLAUSIBLE_HIGH = 1000.0

# Frequencies the channels of a typical codeplug cluster around
COMMON_FREQS = (144.0, 145.0, 146.0,
                430.0, 433.0, 435.0, 438.0, 439.0, 440.0)
STEP_MHZ = 0.0125


def _bcd_digits(data):
    digits = []
    for byte in data:
        digits.append((byte >> 4) & 0xF)
        digits.append(byte & 0xF)
    return digits


def _digits_to_mhz(digits):
    if any(d > 9 for d in digits):
        return None
    val = 0
    for d in digits:
        val = val * 10 + d
    return val / 100000.0


def decode_bcd(data):
    """Decode 4 bytes of BCD stored most-significant byte last.

    Returns MHz, or None if any nibble is not a decimal digit.
    """
    return _digits_to_mhz(_bcd_digits(reversed(bytes(data[:4]))))


def decode_bcd_forward(data):
    """Decode 4 bytes of BCD stored in natural byte order"""
    mhz = _digits_to_mhz(_bcd_digits(bytes(data[:4])))
    if mhz is None or not 0.0 <= mhz <= 2000.0:
        return None
    return mhz


def encode_bcd(mhz):
    """Encode @mhz in the layout decode_bcd() reads"""
    val = int(round(mhz * 100000))
    if not 0 <= val <= 99999999:
        raise ValueError('Frequency %r does not fit in 8 digits' % mhz)
    digits = '%08i' % val
    packed = bytes(int(digits[i:i + 2], 16) for i in range(0, 8, 2))
    return packed[::-1]


def decode_float32(data):
    """Decode 4 bytes as a little-endian float32 MHz value.

    Returns None for anything outside 0-2000 MHz.
    """
    value, = struct.unpack('<f', bytes(data[:4]))
    if not math.isfinite(value) or not 0.0 <= value <= 2000.0:
        return None
    return value


def is_plausible(mhz):
    return mhz is not None and PLAUSIBLE_LOW <= mhz <= PLAUSIBLE_HIGH


def band_score(mhz):
    """Score how much @mhz looks like a real channel frequency.

    Up to 2 points for being within 2 MHz of a common frequency, plus half
    a point if it sits on a 12.5 kHz step.
    """
    best = 0.0
    for freq in COMMON_FREQS:
        dist = abs(mhz - freq)
        if dist < 2.0:
            best = max(best, 2.0 - dist)
    steps = mhz / STEP_MHZ
    if abs(steps - round(steps)) < 0.02:
        best += 0.5
    return best


def decode_frequency(data, rx_hint=0.0):
    """Decode a frequency word, trying both BCD byte orders.

    If neither order gives something plausible, @rx_hint is returned when
    it is itself plausible (treat the channel as simplex). Returns 0.0
    when nothing works.
    """
    rev = decode_bcd(data)
    fwd = decode_bcd_forward(data)
    rev_ok = is_plausible(rev)
    fwd_ok = is_plausible(fwd)
    if rev_ok and not fwd_ok:
        return rev
    elif fwd_ok and not rev_ok:
        return fwd
    elif rev_ok and fwd_ok:
        return fwd if band_score(fwd) > band_score(rev) else rev

    if is_plausible(rx_hint):
        return rx_hint
    LOG.debug('No plausible frequency in %s', bytes(data[:4]).hex())
    return 0.0
