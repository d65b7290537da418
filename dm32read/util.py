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


def hexprint(data, addrfmt=None, base=0):
    """Return a hexdump-like encoding of @data

    @base is added to the printed addresses so that a slice of the image
    can be dumped with its real addresses.
    """
    if addrfmt is None:
        addrfmt = '%(addr)06X'

    block_size = 8
    out = ""

    blocks = len(data) // block_size
    if len(data) % block_size:
        blocks += 1

    for block in range(0, blocks):
        addr = base + block * block_size
        try:
            out += addrfmt % locals()
        except (OverflowError, ValueError, TypeError, KeyError):
            out += "%06X" % addr
        out += ': '

        for j in range(0, block_size):
            try:
                out += "%02x " % data[(block * block_size) + j]
            except IndexError:
                out += "   "

        out += "  "

        for j in range(0, block_size):
            try:
                char = data[(block * block_size) + j]
            except IndexError:
                char = ord('.')

            if char > 0x20 and char < 0x7E:
                out += "%s" % chr(char)
            else:
                out += "."

        out += "\n"

    return out


def hexstr(data, sep=' '):
    """Return @data as upper-case hex pairs joined by @sep"""
    return sep.join('%02X' % b for b in data)


def is_ascii_print(byte):
    """True if @byte is a printable ASCII character (space to tilde)"""
    return 32 <= byte <= 126


def ascii_runs(data, start=0, minlen=1, maxlen=63):
    """Yield (offset, text) for each run of printable ASCII in @data

    Runs longer than @maxlen are split, and runs shorter than @minlen are
    skipped. Offsets are relative to @start.
    """
    pos = 0
    while pos < len(data):
        if not is_ascii_print(data[pos]):
            pos += 1
            continue
        end = pos
        while (end < len(data) and is_ascii_print(data[end]) and
               end - pos < maxlen):
            end += 1
        if end - pos >= minlen:
            yield start + pos, data[pos:end].decode('ascii')
        pos = end
