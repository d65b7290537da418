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

"""Human-readable and CSV output for a captured DM-32 image

Nothing in here talks to the radio. Everything works from a MemoryImage
and the ParsedChannel records decoded from it.
"""

from collections import namedtuple
import csv
import logging
import os

from dm32read import errors, freqcodec, locator, util

LOG = logging.getLogger(__name__)

NCHAN = 4000
NZONES = 250

ZONES_MAX_ADDR = 0x010000
# The short zone-name table lives at low addresses
CLEAN_ZONES_MAX_ADDR = 0x002000
MAX_ZONES = 128
# Validation looks at more candidates than the printed table
MAX_ZONES_VALIDATE = 256
DEBUG_SLOTS = 128

RegionSummary = namedtuple('RegionSummary', [
    'addr', 'length', 'nonff', 'non00', 'strings', 'samples', 'hint'])

Zone = namedtuple('Zone', ['offset', 'name'])


def summarize_region(image, addr, length):
    """Describe what the captured bytes of a block look like"""
    end = min(addr + length, image.high_water_mark)
    data = image.get(addr, end - addr) if end > addr else b''
    nonff = sum(1 for b in data if b != 0xFF)
    non00 = sum(1 for b in data if b != 0x00)
    runs = [text for _off, text in util.ascii_runs(data, addr, minlen=4)]
    samples = runs[:2]

    hint = ''
    if any('Contacts' in s for s in samples):
        hint = 'contacts?'
    elif any('Roam' in s for s in samples):
        hint = 'roam?'
    elif len(runs) > 10 and 0x006000 <= addr < 0x007000:
        hint = 'channel/zone labels?'
    return RegionSummary(addr, length, nonff, non00, len(runs), samples,
                         hint)


def looks_like_zone(name):
    """Zone names are short proper nouns like 'Richmond' or 'Henrico 2'"""
    if not 3 <= len(name) <= 24:
        return False
    if not name[0].isupper():
        return False
    lowers = uppers = 0
    for c in name:
        if not (c.isascii() and (c.isalnum() or c in ' -')):
            return False
        if c.islower():
            lowers += 1
        elif c.isupper():
            uppers += 1
    # Prefer proper nouns: some lowercase, not shouting
    return lowers > 0 and uppers <= len(name) // 2 + 1


def find_zones(image, blocks, limit=MAX_ZONES):
    """Return every distinct zone-like string in the low blocks"""
    zones = []
    seen = set()
    for block in blocks:
        if block.addr >= ZONES_MAX_ADDR:
            continue
        end = min(block.addr + block.length, image.high_water_mark)
        if end <= block.addr:
            continue
        data = image.get(block.addr, end - block.addr)
        for offset, text in util.ascii_runs(data, block.addr):
            if text in seen or not looks_like_zone(text):
                continue
            if len(zones) >= limit:
                return zones
            seen.add(text)
            zones.append(Zone(offset, text))
    return zones


def clean_zones(zones):
    """Keep the zones from the short name table near the start of memory"""
    return [z for z in zones
            if z.offset < CLEAN_ZONES_MAX_ADDR and 0 < len(z.name) <= 16]


def tx_column(rx, tx):
    """Show common repeater splits as an offset, anything else as MHz"""
    diff = tx - rx
    for offset, label in ((5.0, '+5'), (-5.0, '-5'),
                          (0.6, '+0.6'), (-0.6, '-0.6')):
        if abs(diff - offset) < 0.001:
            return label
    return '%.5f' % tx


def power_label(channel):
    return 'High' if channel.power_high else 'Low'


def channel_fields(index, channel):
    """The per-channel fields every consumer gets, formatted"""
    return {
        'slot': index,
        'offset_hex': '%06X' % channel.slot_offset,
        'label': channel.name,
        'rx_mhz': '%.5f' % channel.rx_mhz,
        'tx_mhz': '%.5f' % channel.tx_mhz,
        'timeslot': channel.timeslot,
        'power': power_label(channel),
        'color_code': channel.color_code,
        'params_hex16': util.hexstr(channel.params),
    }


DIGITAL_HEADER = """
# Table of digital channels.
# 1) Channel number: 1-%(nchan)i
# 2) Name: up to 16 characters, use '_' instead of space
# 3) Receive frequency in MHz
# 4) Transmit frequency or +/- offset in MHz
# 5) Transmit power: High, Low
# 6) Scan list: - or index in Scanlist table
# 7) Transmit timeout timer in seconds: 0, 15, 30, 45... 555
# 8) Receive only: -, +
# 9) Admit criteria: -, Free, Color
# 10) Color code: 0, 1, 2, 3... 15
# 11) Time slot: 1 or 2
# 12) Receive group list: - or index in Grouplist table
# 13) Contact for transmit: - or index in Contacts table
#
Digital Name             Receive   Transmit Power Scan TOT RO Admit  \
Color Slot RxGL TxContact
"""

ANALOG_HEADER = """
# Table of analog channels.
# 1) Channel number: 1-%(nchan)i
# 2) Name: up to 16 characters, use '_' instead of space
# 3) Receive frequency in MHz
# 4) Transmit frequency or +/- offset in MHz
# 5) Transmit power: High, Low
# 6) Scan list: - or index
# 7) Transmit timeout timer in seconds: 0, 15, 30, 45... 555
# 8) Receive only: -, +
# 9) Admit criteria: -, Free, Tone
# 10) Squelch level: 0, 1, 2, 3, 4, 5, 6, 7, 8, 9
# 11) Guard tone for receive, or '-' to disable
# 12) Guard tone for transmit, or '-' to disable
# 13) Bandwidth in kHz: 12.5, 20, 25
#
Analog  Name             Receive   Transmit Power Scan TOT RO Admit  \
Squelch RxTone TxTone Width
"""

ZONE_HEADER = """
# Table of channel zones.
# 1) Zone number: 1-%(nzones)i
# 2) Name: up to 16 characters, use '_' instead of space
# 3) List of channels: numbers and ranges (N-M) separated by comma
#
"""


def format_region_map(out, image, blocks):
    out.write("# DM-32: region map (experimental)\n")
    for block in blocks:
        summary = summarize_region(image, block.addr, block.length)
        hint = ' (%s)' % summary.hint if summary.hint else ''
        out.write("0x%06X..0x%06X size=%i nonFF=%i non00=%i strings=%i%s\n"
                  % (block.addr, block.addr + block.length - 1,
                     block.length, summary.nonff, summary.non00,
                     summary.strings, hint))
        for i, sample in enumerate(summary.samples):
            prefix = '  e.g. ' if i == 0 else '       '
            out.write("%s'%s'\n" % (prefix, sample))


def format_channels(out, channels):
    """Write the channel tables. @channels is a list of (index, channel)"""
    out.write(DIGITAL_HEADER % {'nchan': NCHAN})
    for number, (_index, ch) in enumerate(channels, 1):
        name16 = ch.name[:16].replace(' ', '_')
        out.write("%5i   %-16.16s %-8.6g %-8s %-5s %-4s %-3s %-2s "
                  "%-5i %-4i %-4s %-8s\n" % (
                      number, name16, ch.rx_mhz,
                      tx_column(ch.rx_mhz, ch.tx_mhz), power_label(ch),
                      '-', '-', '-', ch.color_code, ch.timeslot, '-', '-'))

    # Analog rows are left out until the analog fields are mapped
    out.write(ANALOG_HEADER % {'nchan': NCHAN})


def format_zones(out, zones, verbose=True):
    out.write("\n")
    if verbose:
        out.write(ZONE_HEADER % {'nzones': NZONES})
    out.write("Zone    Name             Channels\n")
    for number, zone in enumerate(zones, 1):
        out.write("%4i    %-16.16s -\n" % (number, zone.name))


def print_config(out, radio_name, image, blocks, channels, verbose=False):
    """Write the region map, channel tables and zone table to @out"""
    if not verbose:
        return

    out.write("Radio: %s\n" % radio_name)
    format_region_map(out, image, blocks)
    if channels:
        format_channels(out, channels)
    zones = clean_zones(find_zones(image, blocks))
    if zones:
        format_zones(out, zones, verbose)


def _debug_slot(image, addr, stride):
    """Return the raw view of one slot used by the debug CSV, or None"""
    limit = image.high_water_mark
    pos = addr
    while (pos < limit and pos - addr < 63 and
           util.is_ascii_print(image.byte(pos))):
        pos += 1
    if not (pos < limit and image.byte(pos) == 0x00):
        return None
    label = image.get(addr, pos - addr).decode('ascii')

    sig = pos + 1
    for i in range(locator.LABEL_PAD_MAX):
        if sig < limit and image.byte(sig) == 0xFF:
            sig += 1
        else:
            break
    # Some slots carry extra bytes between the label and the data
    for cand in range(sig, min(sig + locator.SIG_SCAN_MAX, limit)):
        if locator.is_slot_signature(image, cand):
            sig = cand
            break

    rx_bcd = tx_bcd = rx_f32 = tx_f32 = 0.0
    if image.known(sig, 8):
        words = image.get(sig, 8)
        rx_bcd = freqcodec.decode_bcd(words[0:4]) or 0.0
        tx_bcd = freqcodec.decode_bcd(words[4:8]) or 0.0
        rx_f32 = freqcodec.decode_float32(words[0:4]) or 0.0
        tx_f32 = freqcodec.decode_float32(words[4:8]) or 0.0

    def clipped(start, length):
        length = max(0, min(length, limit - start))
        return image.get(start, length) if length else b''

    return {
        'label': label,
        'rx_bcd_mhz': '%.5f' % rx_bcd,
        'tx_bcd_mhz': '%.5f' % tx_bcd,
        'rx_f32_mhz': '%.5f' % rx_f32,
        'tx_f32_mhz': '%.5f' % tx_f32,
        'bytes_hex': util.hexstr(clipped(addr, stride)),
        'params_hex16': util.hexstr(clipped(sig + locator.PARAMS_OFS,
                                            locator.PARAMS_LEN)),
        'sig_hex32': util.hexstr(clipped(sig, 32)),
    }


SLOTS_DEBUG_FIELDS = ['slot', 'offset_hex', 'label', 'rx_bcd_mhz',
                      'tx_bcd_mhz', 'rx_f32_mhz', 'tx_f32_mhz', 'bytes_hex',
                      'params_hex16', 'sig_hex32']
CHANNEL_FIELDS = ['slot', 'offset_hex', 'label', 'rx_mhz', 'tx_mhz',
                  'timeslot', 'power', 'color_code', 'params_hex16']


def write_slots_debug_csv(path, decoder):
    """Dump the raw slots of the channel window for reverse engineering"""
    with open(path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=SLOTS_DEBUG_FIELDS)
        writer.writeheader()
        for index, addr in decoder.slots(window=DEBUG_SLOTS):
            row = _debug_slot(decoder.image, addr, 0x30)
            if row is None:
                continue
            row.update(slot=index, offset_hex='%06X' % addr)
            writer.writerow(row)


def write_channels_fields_csv(path, channels):
    with open(path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=CHANNEL_FIELDS)
        writer.writeheader()
        for index, channel in channels:
            writer.writerow(channel_fields(index, channel))


def write_zones_csv(path, zones):
    with open(path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['offset_hex', 'name'])
        for zone in zones:
            writer.writerow(['%06X' % zone.offset, zone.name])


def write_channels_csv(path, channels):
    with open(path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['offset_hex', 'name'])
        for _index, channel in channels:
            writer.writerow(['%06X' % channel.slot_offset, channel.name])


def write_csv_files(directory, image, blocks, decoder, channels):
    """Write all the CSV files into @directory, returning their paths"""
    zones = clean_zones(find_zones(image, blocks))
    paths = {
        'slots': os.path.join(directory, 'dm32_slots_debug.csv'),
        'fields': os.path.join(directory, 'dm32_channels_fields.csv'),
        'zones': os.path.join(directory, 'dm32_zones.csv'),
        'channels': os.path.join(directory, 'dm32_channels.csv'),
    }
    write_slots_debug_csv(paths['slots'], decoder)
    write_channels_fields_csv(paths['fields'], channels)
    write_zones_csv(paths['zones'], zones)
    write_channels_csv(paths['channels'], channels)
    for path in paths.values():
        LOG.info('Wrote %s', path)
    return paths


ValidationResult = namedtuple('ValidationResult',
                              ['kind', 'checked', 'missing'])


def validate_export(stream, zone_names, channel_names):
    """Compare a vendor CSV export against what was found in the image.

    Zone exports have 'Zone Name' and 'Channel Members' columns, channel
    exports a 'Channel Name' column. Returns a ValidationResult listing
    the missing items.
    """
    reader = csv.reader(stream)
    try:
        header = next(reader)
    except StopIteration:
        raise errors.InvalidDataError('Empty CSV input')
    header_line = ','.join(header)

    if 'Zone Name' in header_line and 'Channel Members' in header_line:
        kind = 'zones'
    elif 'Channel Name' in header_line:
        kind = 'channels'
    else:
        LOG.debug('Header: %s', header_line)
        raise errors.InvalidDataError(
            'Unsupported CSV format for DM-32 validation')

    zone_names = set(zone_names)
    channel_names = set(channel_names)
    checked = 0
    missing = []
    for row in reader:
        if len(row) < 3 or not any(row):
            continue
        name = row[1]
        checked += 1
        if kind == 'zones':
            if name not in zone_names:
                LOG.warning('Missing zone: %s', name)
                missing.append(('zone', name))
            for member in row[2].split('|'):
                member = member.strip()
                if member and member not in channel_names:
                    LOG.warning('Missing channel from radio: %s (zone %s)',
                                member, name)
                    missing.append(('channel', member))
        elif name not in channel_names:
            LOG.warning('Missing channel: %s', name)
            missing.append(('channel', name))

    return ValidationResult(kind, checked, missing)
