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

import enum
import logging
import struct
import time

from dm32read import errors, memmap, util

LOG = logging.getLogger(__name__)


class TransferState(enum.Enum):
    IDLE = 'idle'
    REQUEST_SENT = 'request sent'
    SYNCHRONIZING_HEADER = 'synchronizing header'
    RECEIVING_PAYLOAD = 'receiving payload'
    COMPLETE = 'complete'
    FAILED = 'failed'


class BlockTransferClient:
    """Reads blocks of radio memory into a MemoryImage

    Each request is answered with a header echoing the address and length,
    followed by the raw bytes. The radio (or the cable) tends to leave fill
    bytes, stray ACKs and the tail of earlier probe replies in the input
    stream, so the reply header is searched for rather than expected at
    the first byte.

    Usage example:
        client = BlockTransferClient(pipe, image)
        if not client.read_block_with_retry(0x6000, 0x1000, 2):
            # block stays unknown, carry on with the next one
            ...

    Nothing here ever writes to the radio's memory.
    """

    CMD_READ = 0x52
    REPLY_MARKER = 0x57
    HEADER_LEN = 6
    MAX_ADDRESS = 0xFFFFFF
    MAX_LENGTH = 0xFFFF

    def __init__(self, pipe, image, bound=memmap.MEMSIZE,
                 byte_timeout=0.15, empty_read_cost=0.2, header_timeout=4.0,
                 header_rest_timeout=5.0, chunk_size=512, chunk_timeout=2.0,
                 resync_budget=100000, backoff=0.05, flush_msec=100):
        self.pipe = pipe
        self.image = image
        self.bound = min(bound, image.capacity)
        self.byte_timeout = byte_timeout
        self.empty_read_cost = empty_read_cost
        self.header_timeout = header_timeout
        self.header_rest_timeout = header_rest_timeout
        self.chunk_size = chunk_size
        self.chunk_timeout = chunk_timeout
        self.resync_budget = resync_budget
        self.backoff = backoff
        self.flush_msec = flush_msec
        self.state = TransferState.IDLE

    @classmethod
    def from_config(cls, pipe, image, conf):
        """Build a client using the [transfer] section of @conf"""
        return cls(pipe, image,
                   bound=conf.get_int('memsize', 'transfer',
                                      memmap.MEMSIZE),
                   byte_timeout=conf.get_float('byte_timeout', 'transfer',
                                               0.15),
                   header_timeout=conf.get_float('header_timeout',
                                                 'transfer', 4.0),
                   chunk_timeout=conf.get_float('chunk_timeout',
                                                'transfer', 2.0),
                   resync_budget=conf.get_int('resync_budget', 'transfer',
                                              100000),
                   backoff=conf.get_float('backoff', 'transfer', 0.05))

    def read_bytes(self, length, timeout):
        """Read up to @length bytes, giving up once a read returns nothing
        within @timeout. Returns what arrived, which may be short."""
        data = b''
        try:
            self.pipe.timeout = timeout
            while len(data) < length:
                chunk = self.pipe.read(length - len(data))
                if not chunk:
                    break
                data += chunk
        except Exception as e:
            LOG.error('Error reading from radio: %s', e)
            raise errors.ProtocolError('Unable to read from radio') from e
        return data

    def write_bytes(self, data):
        try:
            self.pipe.write(data)
        except Exception as e:
            LOG.error('Error writing to radio: %s', e)
            raise errors.ProtocolError('Unable to write to radio') from e

    def send_ascii(self, text):
        LOG.debug("send '%s'", text)
        self.write_bytes(text.encode('ascii'))

    def send_raw(self, data):
        LOG.debug('send:\n%s', util.hexprint(data))
        self.write_bytes(data)

    def drain(self, msec):
        """Consume whatever the radio sends for @msec milliseconds.

        Replies are only logged. Returns the number of bytes seen.
        """
        total = 0
        for i in range(max(1, msec // 50)):
            data = self.read_bytes(512, 0.05)
            if data:
                total += len(data)
                LOG.debug('recv %i bytes\n%s', len(data),
                          util.hexprint(data))
        if not total:
            LOG.debug('idle (%i ms)', msec)
        return total

    def _clean_buffer(self):
        """Throw away the rest of a failed reply so that the next attempt
        does not resync on a marker byte inside stale payload"""
        try:
            stale = self.drain(self.flush_msec)
        except errors.ProtocolError as e:
            LOG.debug('Unable to flush input: %s', e)
            return
        if stale:
            LOG.debug('Discarded %i stale bytes', stale)

    @classmethod
    def make_request(cls, address, length):
        """Build the 6-byte read request: big-endian 24-bit address,
        little-endian 16-bit length"""
        return struct.pack('>BBH', cls.CMD_READ, address >> 16,
                           address & 0xFFFF) + struct.pack('<H', length)

    def check_bounds(self, address, length):
        if not (0 <= address <= self.MAX_ADDRESS and
                0 <= length <= self.MAX_LENGTH):
            raise errors.BoundsError(
                'Read of %r bytes at %r does not fit the request frame' % (
                    length, address))
        if address + length > self.bound:
            raise errors.BoundsError(
                'Read of %i bytes at 0x%06X exceeds memory bound 0x%06X' % (
                    length, address, self.bound))

    def _sync_header(self):
        """Skip bytes until the reply marker, then return the full header"""
        self.state = TransferState.SYNCHRONIZING_HEADER
        waited = 0.0
        skipped = 0
        deadline = time.monotonic() + self.header_timeout
        while waited < self.header_timeout and time.monotonic() < deadline:
            byte = self.read_bytes(1, self.byte_timeout)
            if not byte:
                waited += self.empty_read_cost
                continue
            if byte[0] == self.REPLY_MARKER:
                if skipped:
                    LOG.debug('Skipped %i bytes before reply header',
                              skipped)
                rest = self.read_bytes(self.HEADER_LEN - 1,
                                       self.header_rest_timeout)
                if len(rest) != self.HEADER_LEN - 1:
                    LOG.debug('Partial header:\n%s',
                              util.hexprint(byte + rest))
                    raise errors.ProtocolError('Short reply header')
                return byte + rest
            skipped += 1
            if skipped > self.resync_budget:
                raise errors.ProtocolError(
                    'No reply header within %i bytes' % self.resync_budget)
        raise errors.ProtocolError('Timed out waiting for reply header')

    def read_block(self, address, length):
        """Read @length bytes at @address into the image.

        Raises BoundsError (before anything is sent) if the range is out of
        bounds, or ProtocolError if the reply is wrong or incomplete. Bytes
        received before a payload stall are kept in the image.
        """
        self.state = TransferState.IDLE
        self.check_bounds(address, length)

        request = self.make_request(address, length)
        LOG.debug('R %s', util.hexstr(request[1:]))
        try:
            self.write_bytes(request)
            self.state = TransferState.REQUEST_SENT

            header = self._sync_header()
            if header[1:] != request[1:]:
                LOG.debug('Unexpected reply header, expected/received:\n'
                          '%s%s', util.hexprint(request),
                          util.hexprint(header))
                raise errors.ProtocolError(
                    'Radio answered with the wrong block for 0x%06X' %
                    address)

            self.state = TransferState.RECEIVING_PAYLOAD
            offset = 0
            while offset < length:
                chunk = min(self.chunk_size, length - offset)
                data = self.read_bytes(chunk, self.chunk_timeout)
                if not data:
                    raise errors.ProtocolError(
                        'Payload timeout after %i of %i bytes at 0x%06X' % (
                            offset, length, address))
                self.image.write(address + offset, data)
                offset += len(data)
        except errors.ProtocolError:
            self.state = TransferState.FAILED
            raise

        self.state = TransferState.COMPLETE
        LOG.debug('read %i bytes at %06X', length, address)

    def read_block_with_retry(self, address, length, attempts):
        """Try read_block() up to @attempts times.

        Returns True on success, False if the block had to be abandoned.
        """
        for attempt in range(1, attempts + 1):
            try:
                self.read_block(address, length)
                return True
            except errors.BoundsError as e:
                LOG.warning('Skipping block: %s', e)
                return False
            except errors.ProtocolError as e:
                LOG.debug('Attempt %i/%i at 0x%06X failed: %s',
                          attempt, attempts, address, e)
                self._clean_buffer()
            time.sleep(self.backoff)
        LOG.warning('Failed to read block at %06X len %i', address, length)
        return False
