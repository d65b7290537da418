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
import os
import sys

from dm32read import memmap

LOG = logging.getLogger(__name__)


class Radio:
    """Base class for all radio drivers.

    A driver offers download (sync_in), upload (sync_out), printing
    (print_config), parsing (get_channels) and verification against a
    reference export (verify_csv). Drivers that can not do one of them
    raise NotImplementedError.
    """
    VENDOR = "Unknown"
    MODEL = "Unknown"
    VARIANT = ""

    BAUD_RATE = 9600
    # Whether or not we should assert DTR when opening the serial port
    WANTS_DTR = True
    # Whether or not we should assert RTS when opening the serial port
    WANTS_RTS = True

    def status_fn(self, status):
        """Deliver @status to the user"""
        console_status(status)

    def __init__(self, pipe):
        self.pipe = pipe

    @classmethod
    def get_name(cls) -> str:
        """Return a printable name for this radio"""
        return "%s %s" % (cls.VENDOR, cls.MODEL)

    def sync_in(self):
        """Initiate a radio-to-PC clone operation"""
        raise NotImplementedError()

    def sync_out(self):
        """Initiate a PC-to-radio clone operation"""
        raise NotImplementedError()

    def get_channels(self):
        """Return the channels decoded from the radio's memory"""
        raise NotImplementedError()

    def print_config(self, out, verbose=False):
        """Write a human-readable summary of the configuration to @out"""
        raise NotImplementedError()

    def verify_csv(self, stream):
        """Check a reference CSV export against the radio's contents.

        Returns True if everything in the export was found.
        """
        raise NotImplementedError()


class CloneModeRadio(Radio):
    """A clone-mode radio does a memory dump into a MemoryImage which can
    be stored in an image file"""
    _memsize = memmap.MEMSIZE

    def __init__(self, pipe):
        self._mmap = memmap.MemoryImage(self._memsize)

        if isinstance(pipe, str):
            self.pipe = None
            self.load_mmap(pipe)
        elif isinstance(pipe, memmap.MemoryImage):
            self.pipe = None
            self._mmap = pipe
            self.process_mmap()
        else:
            Radio.__init__(self, pipe)

    def process_mmap(self):
        """Process a newly-loaded or downloaded memory map"""
        pass

    def load_mmap(self, filename):
        """Load the radio's memory map from @filename"""
        self._mmap = memmap.MemoryImage.load(filename, self._memsize)
        self.process_mmap()

    def save_mmap(self, filename):
        """Write the captured memory to @filename"""
        self._mmap.save(filename)

    def get_mmap(self):
        """Return the radio's memory map object"""
        return self._mmap


class ExperimentalRadio:
    """Interface for experimental radios"""
    @classmethod
    def get_experimental_warning(cls):
        return ("This radio's driver is marked as experimental and may " +
                "be unstable or unsafe to use.")


class Status:
    """Clone status object for conveying clone progress to the user"""
    name = "Job"
    msg = "Unknown"
    max = 100
    cur = 0

    def __str__(self):
        try:
            pct = (self.cur / float(self.max)) * 100
            nticks = int(pct) // 10
            ticks = "=" * nticks
        except (ValueError, ZeroDivisionError):
            pct = 0.0
            ticks = "?" * 10

        return "|%-10s| %2.1f%% %s" % (ticks, pct, self.msg)


def console_status(status):
    """Write a status object to the console"""
    from dm32read import logger
    if not logger.is_visible(logging.WARN):
        return
    sys.stdout.write("\r%s" % status)
    if status.cur == status.max:
        sys.stdout.write(os.linesep)
