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

from dm32read import platform
from configparser import ConfigParser
import os

LOG = logging.getLogger(__name__)

DEFAULT_NAME = "dm32read.conf"


class DM32Config:
    """Settings read from an INI-style file.

    Sections used:
        [serial]    port, baud
        [transfer]  attempts, backoff, byte_timeout, header_timeout,
                    chunk_timeout, resync_budget, memsize
        [decoder]   chan_window

    Anything missing falls back to the default given by the caller.
    """

    def __init__(self, basepath, name=DEFAULT_NAME):
        self.__basepath = basepath
        self.__name = name

        self.__config = ConfigParser(interpolation=None)

        cfg = os.path.join(basepath, name)
        if os.path.exists(cfg):
            try:
                self.__config.read(cfg, encoding='utf-8-sig')
            except UnicodeDecodeError:
                LOG.warning('Failed to read config as UTF-8; '
                            'falling back to default encoding')
                self.__config.read(cfg)
            LOG.debug('Loaded config from %s', cfg)

    @classmethod
    def from_file(cls, filename):
        return cls(os.path.dirname(os.path.abspath(filename)),
                   os.path.basename(filename))

    def get(self, key, section, default=None):
        if not self.__config.has_option(section, key):
            return default

        return self.__config.get(section, key)

    def _get_typed(self, conv, key, section, default):
        value = self.get(key, section)
        if value is None:
            return default
        try:
            return conv(value)
        except ValueError:
            LOG.warning('Invalid value %r for %s.%s, using %r',
                        value, section, key, default)
            return default

    def get_int(self, key, section, default=None):
        # Accept hex for addresses and sizes
        return self._get_typed(lambda v: int(v, 0), key, section, default)

    def get_float(self, key, section, default=None):
        return self._get_typed(float, key, section, default)

    def set(self, key, value, section):
        if not self.__config.has_section(section):
            self.__config.add_section(section)

        self.__config.set(section, key, str(value))


_CONFIG = None


def get(filename=None):
    """Return the config singleton, optionally loading it from @filename"""
    global _CONFIG

    if filename:
        _CONFIG = DM32Config.from_file(filename)
    elif _CONFIG is None:
        p = platform.get_platform()
        _CONFIG = DM32Config(p.config_dir())

    return _CONFIG
