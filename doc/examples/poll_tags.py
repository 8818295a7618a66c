# doc/examples/poll_tags.py

"""
Polls an Alien reader for tags and prints one sighting line per tag:

    ISEE alien.<tag id> FROM <name>.<antenna> AT <epoch> TIMEOUT 10

Usage:
    python poll_tags.py -c /dev/ttyUSB0 [-a 0,1] [-n dock] [-d]
    python poll_tags.py -h alien1.example.com:23 [-l login.txt]

The login file holds the login name on its first line and the password
on its second. Set ALIEN_DEBUG=1 in the environment to trace every
command exchanged with the reader.
"""

import argparse
import logging
import os
import sys
import time

from alien_rfid.core.exceptions import AlienRfidError
from alien_rfid.core.reader import ReaderClient
from alien_rfid.transport.serial_transport import SerialTransport
from alien_rfid.transport.tcp_transport import TcpTransport

TAG_TIMEOUT = 10 # Seconds a sighting stays valid for the consumer
CMD_TIMEOUT = 15
POLL_TIME = 5
DEFAULT_NAME = 'alien'

logger = logging.getLogger("PollTagsExample")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Alien RFID tag poller', add_help=False)
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument('-c', dest='serial_port', help='Serial port the reader is attached to')
    target.add_argument('-h', dest='host', help='Reader address as host[:port] (default port 4001)')
    parser.add_argument('-l', dest='login_file', help='File holding login and password lines')
    parser.add_argument('-a', dest='antennas', default='0', help='Comma separated antennas (default: %(default)s)')
    parser.add_argument('-n', dest='name', default=DEFAULT_NAME, help='Reader name in output (default: %(default)s)')
    parser.add_argument('-d', dest='debug', action='store_true', default=bool(os.environ.get('ALIEN_DEBUG')),
                        help='Trace reader commands')
    parser.add_argument('--help', action='help', help='Show this help message and exit')
    return parser.parse_args()


def read_login_file(path: str):
    with open(path) as login_file:
        login = login_file.readline().rstrip('\r\n')
        password = login_file.readline().rstrip('\r\n')
    return login, password


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    )

    login = password = None
    if args.login_file:
        login, password = read_login_file(args.login_file)

    if args.serial_port:
        transport = SerialTransport({'port': args.serial_port})
    else:
        transport = TcpTransport.from_address(args.host)

    antennas = [antenna.strip() for antenna in args.antennas.split(',')]

    try:
        with ReaderClient(transport, timeout=CMD_TIMEOUT, login=login, password=password,
                          Debug=args.debug) as reader:
            logger.info(f"Reader version: {reader.get('ReaderVersionString')}")

            errors = reader.set(PersistTime=0, AcquireMode='Inventory',
                                AntennaSequence=antennas, TagListAntennaCombine='OFF')
            if errors:
                logger.error(f"Couldn't configure reader: {errors}")
                return 1

            while True:
                logger.info("Scanning for tags")
                tags = reader.readtags()
                now = int(time.time())
                for tag in tags:
                    print(f"ISEE alien.{tag.id} FROM {args.name}.{tag.ant} AT {now} TIMEOUT {TAG_TIMEOUT}",
                          flush=True)
                time.sleep(POLL_TIME)
    except KeyboardInterrupt:
        logger.info("Stopped by user.")
    except AlienRfidError as e:
        logger.error(f"Reader error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
