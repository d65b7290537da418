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


class RadioError(Exception):
    """An error occurred while talking to the radio"""
    pass


class BoundsError(RadioError):
    """A block request reaches past the end of the radio's address space"""
    pass


class ProtocolError(RadioError):
    """The radio's reply to a block request was missing, late or wrong"""
    pass


class InvalidDataError(Exception):
    """An image file or reference export could not be understood"""
    pass


class UnknownMemoryError(IndexError):
    """The requested bytes have not been captured from the radio"""
    pass
