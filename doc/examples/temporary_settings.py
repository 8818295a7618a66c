# doc/examples/temporary_settings.py

"""
Shows per-call and scoped settings overrides against the in-memory reader
emulator, so it runs without hardware. Swap the transport for a
SerialTransport or TcpTransport to run it against a real reader.
"""

import logging
import os

from alien_rfid.core.reader import ReaderClient
from alien_rfid.transport.mock import MockTransport

logging.basicConfig(
    level=logging.DEBUG if os.environ.get('ALIEN_DEBUG') else logging.INFO,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s"
)
logger = logging.getLogger("TemporarySettingsExample")


def main():
    with ReaderClient(MockTransport(), PersistTime=0) as reader:
        version = reader.get('ReaderVersion')
        logger.info(f"Connected to {version.reader_type} (software {version.software})")

        tags = reader.readtags()
        logger.info(f"Antenna 0 sees {len(tags)} tag(s): {', '.join(tag.id for tag in tags)}")

        # Only for this call; AntennaSequence is back to 0 afterwards
        tags = reader.readtags(AntennaSequence=[1, 2])
        logger.info(f"Antennas 1 and 2 see {len(tags)} tag(s)")
        logger.info(f"AntennaSequence is now {reader.get('AntennaSequence')}")

        # Several commands under the same mask
        with reader.overrides(Mask='8000/16'):
            logger.info(f"Mask inside block: {reader.get('Mask')!r}")
            reader.sleeptags()
            reader.waketags()
        logger.info(f"Mask after block: {reader.get('Mask')!r}")


if __name__ == "__main__":
    main()
