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

"""Read-only driver for the Baofeng DM-32 (experimental)

The programming protocol was worked out from captures of the vendor
software over the CH340 cable:

    PSEARCH / PASSSTA / SYSINFO    ASCII probes, replies ignored
    56 00 00 xx xx                 version/info probes
    47 00 00 00 00 01              resource fetch
    FF FF FF FF 0C "PROGRAM" 02 06 enter program mode
    52 aa aa aa ll ll              read ll bytes at aaa
    57 aa aa aa ll ll <data>       reply

Writing is not implemented. The memory layout is only partly known, see
dm32read.locator for how channel slots are found.
"""

from collections import namedtuple
import logging
import time

from dm32read import channel, directory, errors, radio_common, report
from dm32read.protocol import BlockTransferClient

LOG = logging.getLogger(__name__)

MemoryBlock = namedtuple('MemoryBlock', ['addr', 'length'])

# Regions read by the vendor software during a download
BLOCKS = [
    MemoryBlock(0x001000, 0x1000),   # zone names
    MemoryBlock(0x00600C, 0x0FF5),   # channel slots
    MemoryBlock(0x007001, 0x0FFF),
    MemoryBlock(0x008000, 0x1000),
]

PROBE_BLOCK = MemoryBlock(0x008027, 4)

HANDSHAKE = ['PSEARCH', 'PASSSTA', 'SYSINFO']
VERSION_PROBE = b'\x56\x00\x00\x40\x0D'
RESOURCE_FETCH = b'\x47\x00\x00\x00\x00\x01'
PROGRAM_PREAMBLE = b'\xFF\xFF\xFF\xFF\x0CPROGRAM'


def _version_probes():
    yield VERSION_PROBE
    for i in range(1, 17):
        if i == 0x0C:
            # never seen in captures
            continue
        yield bytes([0x56, 0x00, 0x00, 0x00, i])


@directory.register
class DM32Radio(radio_common.CloneModeRadio, radio_common.ExperimentalRadio):
    """Baofeng DM-32"""
    VENDOR = 'Baofeng'
    MODEL = 'DM-32'
    BAUD_RATE = 115200

    BLOCKS = BLOCKS
    ATTEMPTS = 2

    def __init__(self, pipe, conf=None):
        self.conf = conf
        self.unread_blocks = []
        super().__init__(pipe)

    def _conf_int(self, key, section, default):
        if self.conf is None:
            return default
        return self.conf.get_int(key, section, default)

    def _make_client(self):
        if self.conf is None:
            return BlockTransferClient(self.pipe, self._mmap,
                                       bound=self._memsize)
        return BlockTransferClient.from_config(self.pipe, self._mmap,
                                               self.conf)

    def _pulse_lines(self):
        """Drop and raise RTS/DTR once to wake up the cable"""
        self.pipe.rts = False
        self.pipe.dtr = False
        time.sleep(0.05)
        self.pipe.rts = self.WANTS_RTS
        self.pipe.dtr = self.WANTS_DTR
        time.sleep(0.15)

    def _enter_program_mode(self, client):
        self._pulse_lines()

        for cmd in HANDSHAKE:
            client.send_ascii(cmd)
            client.drain(150)

        for i, probe in enumerate(_version_probes()):
            client.send_raw(probe)
            client.drain(100 if i == 0 else 90)

        client.send_raw(RESOURCE_FETCH)
        client.drain(200)

        client.send_raw(PROGRAM_PREAMBLE)
        time.sleep(0.03)
        client.send_raw(b'\x02')
        client.drain(80)
        client.send_raw(b'\x06')
        client.drain(120)

    def _read_blocks(self, client):
        attempts = self._conf_int('attempts', 'transfer', self.ATTEMPTS)

        if client.read_block_with_retry(PROBE_BLOCK.addr, PROBE_BLOCK.length,
                                        attempts):
            LOG.debug('Probe block:\n%s', self._mmap.printable(
                PROBE_BLOCK.addr, PROBE_BLOCK.addr + PROBE_BLOCK.length))
        client.drain(50)

        status = radio_common.Status()
        status.msg = 'Cloning from radio'
        status.max = len(self.BLOCKS)
        for i, block in enumerate(self.BLOCKS):
            LOG.debug('read block %i/%i at %06X len %i', i + 1,
                      len(self.BLOCKS), block.addr, block.length)
            if not client.read_block_with_retry(block.addr, block.length,
                                                attempts):
                self.unread_blocks.append(block)
            status.cur = i + 1
            self.status_fn(status)

    def sync_in(self):
        """Download the mapped regions of the radio's memory.

        Blocks that can not be read are left out of the image and listed
        in self.unread_blocks; the rest of the download carries on.
        """
        self.unread_blocks = []
        client = self._make_client()
        try:
            self._enter_program_mode(client)
            self._read_blocks(client)
        except errors.RadioError:
            raise
        except Exception as e:
            LOG.exception('General failure')
            raise errors.RadioError('Failed to download from radio: %s' % e)

        if self.unread_blocks:
            LOG.warning('%i of %i blocks could not be read: %s',
                        len(self.unread_blocks), len(self.BLOCKS),
                        ', '.join('%06X' % b.addr
                                  for b in self.unread_blocks))
        LOG.info('Captured up to 0x%06X', self._mmap.high_water_mark)
        self.process_mmap()

    def sync_out(self):
        raise errors.RadioError('Upload to the %s is not supported, this '
                                'driver only reads' % self.get_name())

    def get_decoder(self):
        return channel.ChannelSlotDecoder(self._mmap)

    def get_channels(self):
        """Return a list of (slot index, ParsedChannel)"""
        window = self._conf_int('chan_window', 'decoder',
                                channel.CHAN_WINDOW)
        return list(self.get_decoder().scan(window=window))

    def print_config(self, out, verbose=False):
        report.print_config(out, self.get_name(), self._mmap, self.BLOCKS,
                            self.get_channels(), verbose)

    def write_csv(self, directory):
        """Write the debug and channel CSV files into @directory"""
        return report.write_csv_files(directory, self._mmap, self.BLOCKS,
                                      self.get_decoder(),
                                      self.get_channels())

    def verify_csv(self, stream):
        zones = report.find_zones(self._mmap, self.BLOCKS,
                                  limit=report.MAX_ZONES_VALIDATE)
        channels = self.get_channels()
        result = report.validate_export(
            stream, [z.name for z in zones], [c.name for _i, c in channels])
        LOG.info('Checked %i %s; radio has %i zones and %i channels',
                 result.checked, result.kind, len(zones), len(channels))
        if result.missing:
            LOG.warning('Validation FAILED: %i missing items',
                        len(result.missing))
        else:
            LOG.info('Validation PASSED')
        return not result.missing
