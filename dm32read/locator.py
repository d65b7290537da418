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

"""Find where a channel slot's frequency/parameter block starts

A DM-32 channel slot starts with a NUL-terminated label, followed by a
variable amount of 0xFF/0x00 padding and then the data block:

    +0   RX frequency (4 bytes BCD)
    +4   TX frequency (4 bytes BCD)
    +8   parameters (16 bytes)

The amount of padding, and some extra bytes that show up between the
label and the data in some records, are not understood. So every offset
in a window after the padding is scored for how much it looks like the
start of a data block, and the best one wins if it scores well enough.
"""

from collections import namedtuple
import logging

from dm32read import freqcodec, util

LOG = logging.getLogger(__name__)

LABEL_MAX = 31
LABEL_PAD_MAX = 16
SIG_SCAN_MAX = 32
SUB_ALIGNMENTS = 4
# Some records carry four more bytes of padding before the data block
SHIFTED_OFS = 4

PARAMS_OFS = 8
PARAMS_LEN = 16

# Leading bytes of the parameter block
DIGITAL_HEADER = b'\x14\x00\x00\x00'
ANALOG_HEADER = b'\x04\x80\x00\x00'

ACCEPT_SCORE = 9
ACCEPT_SCORE_WITH_PARAMS = 6

SIGNALS = (
    'signature_pattern',  # fixed byte pattern of the two frequency words
    'bcd_plausible',      # both words decode as BCD to a usable frequency
    'simplex',            # ...and are equal
    'duplex_offset',      # ...or 5 MHz / 600 kHz apart
    'ham_band',           # RX is near 2m or 70cm
    'digital_params',     # parameter block starts like a digital channel
    'analog_params',      # parameter block starts like an analog channel
    'param_filler',       # 0xFF filler inside the parameter block
    'float_plausible',    # both words also make sense as float32
)

Weights = namedtuple('Weights', SIGNALS)

PRIMARY_WEIGHTS = Weights(signature_pattern=3, bcd_plausible=5, simplex=2,
                          duplex_offset=2, ham_band=1, digital_params=6,
                          analog_params=5, param_filler=2,
                          float_plausible=1)

# The four-byte-later hypothesis is scored on fewer signals but trusts a
# clean parameter match a little more.
SHIFTED_WEIGHTS = Weights(signature_pattern=2, bcd_plausible=6, simplex=2,
                          duplex_offset=2, ham_band=0, digital_params=7,
                          analog_params=5, param_filler=0,
                          float_plausible=0)

ScoredCandidate = namedtuple('ScoredCandidate',
                             ['offset', 'score',
                              'parameter_pattern_confirmed', 'breakdown'])


def _pair_plausible(rx, tx):
    """RX must be a real frequency, TX may be blank"""
    if tx is None:
        tx = 0.0
    return (rx is not None and
            freqcodec.PLAUSIBLE_LOW < rx < freqcodec.PLAUSIBLE_HIGH and
            0.0 <= tx < freqcodec.PLAUSIBLE_HIGH)


def is_slot_signature(image, sig):
    """Check the known byte patterns of a data block start at @sig"""
    if not image.known(sig, 9):
        return False
    m = image.get(sig, 9)
    # Pattern A: 50 ?? ?? 44 50 ?? ?? 44
    if m[0] == 0x50 and m[3] == 0x44 and m[4] == 0x50 and m[7] == 0x44:
        return True
    # Pattern B: 25 ?? 44 [00] 25 ?? 44
    if m[0] == 0x25 and m[2] == 0x44:
        idx = 4 if m[3] == 0x00 else 3
        if m[idx] == 0x25 and m[idx + 2] == 0x44:
            return True
    return _pair_plausible(freqcodec.decode_bcd(m[0:4]),
                           freqcodec.decode_bcd(m[4:8]))


def params_flavor(params, strict=False):
    """Return 'digital', 'analog' or None for a parameter block.

    With @strict, bytes 4 and 5 must also match what has been observed on
    real channels, which is what the locator scores on.
    """
    head = bytes(params[:4])
    if head == DIGITAL_HEADER and params[5] == 0x01:
        if not strict or params[4] in (0x30, 0x34):
            return 'digital'
    elif head == ANALOG_HEADER:
        if not strict or (params[4] == 0x30 and params[5] == 0x01):
            return 'analog'
    return None


def score_candidate(image, sig, weights=PRIMARY_WEIGHTS):
    """Score how likely @sig is the start of a slot's data block.

    Returns a ScoredCandidate whose breakdown maps each signal that fired
    to the points it earned. The caller must make sure 13 bytes from @sig
    are known.
    """
    fired = set()

    if is_slot_signature(image, sig):
        fired.add('signature_pattern')

    words = image.get(sig, 8)
    rx = freqcodec.decode_bcd(words[0:4])
    tx = freqcodec.decode_bcd(words[4:8])
    if _pair_plausible(rx, tx):
        fired.add('bcd_plausible')
        diff = abs((tx or 0.0) - rx)
        if diff < 0.001:
            fired.add('simplex')
        if 4.999 < diff < 5.001 or 0.599 < diff < 0.601:
            fired.add('duplex_offset')
        if abs(rx - 144.0) < 20.0 or abs(rx - 430.0) < 20.0:
            fired.add('ham_band')

    params_at = sig + PARAMS_OFS
    if image.known(params_at, 13):
        flavor = params_flavor(image.get(params_at, 6), strict=True)
        if flavor:
            fired.add('%s_params' % flavor)
    if (image.known(params_at, 14) and
            image.get(params_at + 10, 4) == b'\xFF' * 4):
        fired.add('param_filler')

    if _pair_plausible(freqcodec.decode_float32(words[0:4]),
                       freqcodec.decode_float32(words[4:8])):
        fired.add('float_plausible')

    breakdown = {}
    for signal in SIGNALS:
        points = getattr(weights, signal)
        if signal in fired and points:
            breakdown[signal] = points
    confirmed = bool(fired & {'digital_params', 'analog_params'})
    return ScoredCandidate(sig, sum(breakdown.values()), confirmed,
                           breakdown)


def is_accepted(candidate):
    if candidate is None:
        return False
    return (candidate.score >= ACCEPT_SCORE or
            (candidate.score >= ACCEPT_SCORE_WITH_PARAMS and
             candidate.parameter_pattern_confirmed))


class SignatureLocator:
    """Finds the data block of channel slots in a MemoryImage"""

    def __init__(self, image, pad_max=LABEL_PAD_MAX, scan_max=SIG_SCAN_MAX):
        self.image = image
        self.pad_max = pad_max
        self.scan_max = scan_max

    def read_label(self, label_start):
        """Return (label, cursor) where cursor is just past the label's NUL
        terminator, or None if there is no terminated label here"""
        limit = self.image.high_water_mark
        pos = label_start
        while (pos < limit and pos - label_start < LABEL_MAX and
               util.is_ascii_print(self.image.byte(pos))):
            pos += 1
        if pos == label_start:
            return None
        if not (pos < limit and self.image.byte(pos) == 0x00):
            return None
        label = self.image.get(label_start, pos - label_start).decode('ascii')
        return label, pos + 1

    def skip_padding(self, cursor):
        limit = self.image.high_water_mark
        for i in range(self.pad_max):
            if cursor < limit and self.image.byte(cursor) in (0xFF, 0x00):
                cursor += 1
            else:
                break
        return cursor

    def max_offset(self, cursor):
        """The furthest signature offset a scan from @cursor can return"""
        return cursor + self.scan_max - 1 + SUB_ALIGNMENTS - 1 + SHIFTED_OFS

    def best_candidate(self, cursor):
        """Score every candidate offset after @cursor and return the best,
        or None if there is not enough captured data to score any"""
        best = None
        for scan in range(self.scan_max):
            base = cursor + scan
            if not self.image.known(base, 13):
                break
            for sub in range(SUB_ALIGNMENTS):
                sig = base + sub
                if not self.image.known(sig, 13):
                    break
                candidate = score_candidate(self.image, sig,
                                            PRIMARY_WEIGHTS)
                if self.image.known(sig + SHIFTED_OFS, 13):
                    shifted = score_candidate(self.image, sig + SHIFTED_OFS,
                                              SHIFTED_WEIGHTS)
                    if shifted.score > candidate.score:
                        candidate = shifted
                if best is None or candidate.score > best.score:
                    best = candidate
        return best

    def locate(self, label_start):
        """Return (signature_offset, label) for the slot at @label_start,
        or None if it does not look like a channel"""
        found = self.read_label(label_start)
        if found is None:
            return None
        label, cursor = found
        cursor = self.skip_padding(cursor)
        best = self.best_candidate(cursor)
        if not is_accepted(best):
            LOG.debug('No signature for %r at 0x%06X (best %s)', label,
                      label_start, best)
            return None
        LOG.debug('Slot %r at 0x%06X: signature 0x%06X score %i %s', label,
                  label_start, best.offset, best.score, best.breakdown)
        return best.offset, label
