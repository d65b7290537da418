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

from collections import namedtuple
import logging

from dm32read import freqcodec, locator

LOG = logging.getLogger(__name__)

CHAN_BASE = 0x00601C    # label of the first slot
CHAN_STRIDE = 0x30
# Only the leading slots are scanned, the radio advertises 4000 channels
CHAN_WINDOW = 240

# Bit positions in the parameter block
PARAM_IDX_POWER = 0
PARAM_IDX_TSCC = 5
PARAM_IDX_MON = 7
POWER_HIGH_BIT = 0x04
TS2_BIT = 0x10
CC_MASK = 0x0F
MONITOR_BIT = 0x01

# The channel is simplex if TX is further than this from RX
MAX_DUPLEX_MHZ = 10.0
IN_BAND_LOW = 100.0
IN_BAND_HIGH = 1000.0

ParsedChannel = namedtuple('ParsedChannel', [
    'slot_offset',       # address of the slot's label
    'signature_offset',  # address of the data block
    'name',
    'rx_mhz',
    'tx_mhz',
    'timeslot',          # 1 or 2
    'color_code',        # 0-15
    'power_high',
    'monitor_flag',
    'params',            # the 16 raw parameter bytes
])


def interpret_params(params):
    """Return (timeslot, color_code, power_high, monitor_flag)"""
    flavor = locator.params_flavor(params)
    power_high = bool(params[PARAM_IDX_POWER] & POWER_HIGH_BIT)
    if flavor == 'digital':
        timeslot = 2 if params[5] & TS2_BIT else 1
        color_code = params[5] & CC_MASK
    elif flavor == 'analog':
        timeslot = 1
        color_code = 0
    else:
        tscc = params[PARAM_IDX_TSCC]
        timeslot = 2 if tscc & TS2_BIT else 1
        color_code = tscc & CC_MASK
    monitor_flag = bool(params[PARAM_IDX_MON] & MONITOR_BIT)
    return timeslot, color_code, power_high, monitor_flag


def clamp_tx(rx_mhz, tx_mhz):
    """Fall back to simplex when TX is implausible for an in-band RX"""
    if IN_BAND_LOW <= rx_mhz <= IN_BAND_HIGH:
        if (not IN_BAND_LOW <= tx_mhz <= IN_BAND_HIGH or
                abs(tx_mhz - rx_mhz) > MAX_DUPLEX_MHZ):
            return rx_mhz
    return tx_mhz


class ChannelSlotDecoder:
    """Decodes channel slots of a MemoryImage into ParsedChannel records"""

    def __init__(self, image):
        self.image = image
        self.locator = locator.SignatureLocator(image)

    def resolve_layout(self, sig):
        """Return (tx_offset, params_offset) relative to @sig.

        Normally TX follows RX and the parameters come after both, but
        some records have the parameter block where TX would be.
        """
        if self.image.get(sig + 4, 4) in (locator.DIGITAL_HEADER,
                                          locator.ANALOG_HEADER):
            return 8, 4
        return 4, 8

    def decode(self, slot_base):
        """Return a ParsedChannel for the slot at @slot_base, or None"""
        found = self.locator.locate(slot_base)
        if found is None:
            return None
        sig, name = found
        if not self.image.known(sig, locator.PARAMS_OFS + locator.PARAMS_LEN):
            LOG.debug('Slot at 0x%06X runs past captured data', slot_base)
            return None

        rx = freqcodec.decode_frequency(self.image.get(sig, 4))
        tx_ofs, params_ofs = self.resolve_layout(sig)
        tx = freqcodec.decode_frequency(self.image.get(sig + tx_ofs, 4),
                                        rx_hint=rx)
        tx = clamp_tx(rx, tx)

        params = self.image.get(sig + params_ofs, locator.PARAMS_LEN)
        timeslot, color_code, power_high, monitor = interpret_params(params)
        return ParsedChannel(slot_base, sig, name, rx, tx, timeslot,
                             color_code, power_high, monitor, params)

    def slots(self, base=CHAN_BASE, stride=CHAN_STRIDE, window=CHAN_WINDOW):
        """Yield (index, address) of each slot in the window that starts
        inside the captured data"""
        for index in range(window):
            addr = base + index * stride
            if addr + 1 >= self.image.high_water_mark:
                break
            yield index, addr

    def scan(self, base=CHAN_BASE, stride=CHAN_STRIDE, window=CHAN_WINDOW):
        """Yield (index, ParsedChannel) for every slot that decodes"""
        for index, addr in self.slots(base, stride, window):
            channel = self.decode(addr)
            if channel is not None:
                yield index, channel
