#!/usr/bin/env python
#
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

import argparse
import logging
import sys

import serial

from dm32read import logger
from dm32read import config, directory, errors, radio_common, report

directory.import_drivers()

LOG = logging.getLogger("dm32read")
RADIOS = directory.DRV_TO_RADIO
DEFAULT_RADIO = "Baofeng_DM-32"


def open_serial(port, rclass, conf):
    baud = conf.get_int('baud', 'serial', rclass.BAUD_RATE)
    LOG.info("opening %s at %i", port, baud)
    if '://' in port:
        pipe = serial.serial_for_url(port, do_not_open=True)
        pipe.baudrate = baud
    else:
        pipe = serial.Serial(baudrate=baud)
        pipe.port = port
    pipe.timeout = 0.25
    pipe.rts = rclass.WANTS_RTS
    pipe.dtr = rclass.WANTS_DTR
    pipe.open()
    LOG.debug('Serial opened: %s (rts=%s dtr=%s)', pipe, pipe.rts, pipe.dtr)
    return pipe


def print_channels(channels):
    for index, channel in channels:
        fields = report.channel_fields(index, channel)
        print("%(slot)3i %(offset_hex)s %(label)-16s %(rx_mhz)10s "
              "%(tx_mhz)10s TS%(timeslot)s CC%(color_code)-2s "
              "%(power)-4s %(params_hex16)s" % fields)


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Read and decode the memory of a Baofeng DM-32")
    logger.add_version_argument(parser)
    parser.add_argument("-s", "--serial", dest="serial", default=None,
                        help="Serial port to download from")
    parser.add_argument("-r", "--radio", dest="radio",
                        default=DEFAULT_RADIO,
                        help="Radio model (see --list-radios)")
    parser.add_argument("--list-radios", action="store_true",
                        help="List radio models")
    parser.add_argument("--config", dest="config", default=None,
                        help="Configuration file to use")
    parser.add_argument("--mmap", dest="mmap", default=None,
                        help="Radio memory image file location")
    parser.add_argument("--download-mmap", dest="download_mmap",
                        action="store_true", default=False,
                        help="Download memory image from radio")

    outarg = parser.add_argument_group("Output Options")
    outarg.add_argument("--list-channels", action="store_true",
                        help="List decoded channels")
    outarg.add_argument("--print-config", action="store_true",
                        help="Print region map, channel and zone tables")
    outarg.add_argument("--write-csv", dest="csv_dir", default=None,
                        help="Write CSV files into this directory")
    outarg.add_argument("--verify", dest="verify", default=None,
                        help="Check a CSV export from the vendor software "
                        "against the radio")
    logger.add_arguments(parser)

    if args is None and len(sys.argv) <= 1:
        parser.print_help()
        sys.exit(0)

    options = parser.parse_args(args)

    logger.handle_options(options)

    if options.list_radios:
        print("Supported Radios:\n\t", "\n\t".join(sorted(RADIOS.keys())))
        sys.exit(0)

    try:
        rclass = directory.get_radio(options.radio)
    except Exception as e:
        LOG.error(e)
        sys.exit(1)

    if issubclass(rclass, radio_common.ExperimentalRadio):
        LOG.warning(rclass.get_experimental_warning())

    conf = config.get(options.config)
    port = options.serial or conf.get('port', 'serial')

    if options.download_mmap or (port and not options.mmap):
        if not port:
            LOG.error("You must specify a serial port with --serial")
            sys.exit(1)
        try:
            pipe = open_serial(port, rclass, conf)
        except serial.SerialException as e:
            LOG.error("Unable to open %s: %s", port, e)
            sys.exit(1)
        radio = rclass(pipe, conf=conf)
        try:
            radio.sync_in()
        except errors.RadioError as e:
            LOG.error(e)
            sys.exit(1)
        finally:
            pipe.close()
        if options.mmap:
            radio.save_mmap(options.mmap)
            LOG.info("Saved image to %s", options.mmap)
    elif options.mmap:
        try:
            radio = rclass(options.mmap, conf=conf)
        except (OSError, errors.InvalidDataError) as e:
            LOG.error("Unable to load %s: %s", options.mmap, e)
            sys.exit(1)
    else:
        LOG.error("You must specify a serial port or an image with --mmap")
        sys.exit(1)

    if options.list_channels:
        print_channels(radio.get_channels())

    if options.print_config:
        radio.print_config(sys.stdout, verbose=True)

    if options.csv_dir:
        radio.write_csv(options.csv_dir)

    if options.verify:
        try:
            with open(options.verify, newline='') as f:
                ok = radio.verify_csv(f)
        except (OSError, errors.InvalidDataError) as e:
            LOG.error(e)
            sys.exit(1)
        sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
