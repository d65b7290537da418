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

import logging

from dm32read import errors, util

LOG = logging.getLogger(__name__)

# Upper bound of the radio's address space that we are willing to read
MEMSIZE = 0x200000


class MemoryImage:
    """
    The part of the radio's memory captured so far

    Bytes are written in by the block reader and the highest address
    written is tracked as the high-water mark. Anything at or above the
    high-water mark has not been seen and can not be read back.
    """

    def __init__(self, capacity=MEMSIZE):
        self._capacity = capacity
        self._data = bytearray()
        self._hwm = 0

    @property
    def capacity(self):
        return self._capacity

    @property
    def high_water_mark(self):
        """One past the highest address written so far"""
        return self._hwm

    def __len__(self):
        return self._hwm

    def known(self, start, length=1):
        """Return True if @length bytes from @start have been captured"""
        return start >= 0 and length >= 0 and start + length <= self._hwm

    def get(self, start, length=1):
        """Return @length bytes from @start, which must all be known"""
        if not self.known(start, length):
            raise errors.UnknownMemoryError(
                'Read of %i bytes at 0x%06X beyond captured region '
                '(0x%06X)' % (length, start, self._hwm))
        return bytes(self._data[start:start + length])

    def byte(self, addr):
        """Return the single byte at @addr as an int"""
        return self.get(addr)[0]

    def write(self, start, data):
        """Store @data at @start and advance the high-water mark"""
        if not data:
            return
        end = start + len(data)
        if start < 0 or end > self._capacity:
            raise errors.BoundsError(
                'Write of %i bytes at 0x%06X exceeds image size 0x%06X' % (
                    len(data), start, self._capacity))
        if end > len(self._data):
            # Never-captured gaps below the high-water mark read as zero
            self._data.extend(b'\x00' * (end - len(self._data)))
        self._data[start:end] = data
        self._hwm = max(self._hwm, end)

    def get_packed(self):
        """Return the captured region as bytes"""
        return bytes(self._data[:self._hwm])

    def printable(self, start=0, end=None):
        """Return a printable hexdump of the known region"""
        if end is None or end > self._hwm:
            end = self._hwm
        return util.hexprint(self._data[start:end], base=start)

    def __repr__(self):
        return '<MemoryImage hwm=0x%06X capacity=0x%06X>' % (
            self._hwm, self._capacity)

    @classmethod
    def from_bytes(cls, data, capacity=MEMSIZE):
        """Build an image as if @data had been read starting at zero"""
        if len(data) > capacity:
            raise errors.InvalidDataError(
                'Image of %i bytes is larger than 0x%06X' % (len(data),
                                                            capacity))
        image = cls(capacity)
        if data:
            image.write(0, data)
        return image

    def save(self, filename):
        """Write the captured region to @filename"""
        data = self.get_packed()
        if not data:
            # Always create the file, even with nothing captured
            data = b'\x00'
        with open(filename, 'wb') as f:
            f.write(data)
        LOG.debug('Saved %i bytes to %s', len(data), filename)

    @classmethod
    def load(cls, filename, capacity=MEMSIZE):
        """Read an image previously written by save()"""
        with open(filename, 'rb') as f:
            data = f.read()
        LOG.debug('Loaded %i bytes from %s', len(data), filename)
        return cls.from_bytes(data, capacity)
