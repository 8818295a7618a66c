# tests/transport/test_serial_transport.py

from unittest.mock import MagicMock, patch

import pytest
import serial

from alien_rfid.core.exceptions import ConnectionError, SerialConnectionError, TimeoutError, WriteError
from alien_rfid.transport.serial_transport import SerialTransport, PURGE_READ_WINDOW


class TestSerialTransport:

    @pytest.fixture(autouse=True)
    def setup_port(self):
        self.mock_port = MagicMock()
        self.mock_port.read.return_value = b''
        self.mock_port.write.side_effect = lambda data: len(data)
        patcher = patch('serial.Serial', return_value=self.mock_port)
        self.mock_serial_cls = patcher.start()
        yield
        patcher.stop()

    def test_requires_port(self):
        with pytest.raises(ValueError):
            SerialTransport({'baudrate': 9600})

    def test_connect_opens_with_defaults(self):
        transport = SerialTransport({'port': '/dev/ttyS0'})
        transport.connect()

        assert transport.is_connected()
        kwargs = self.mock_serial_cls.call_args.kwargs
        assert kwargs['port'] == '/dev/ttyS0'
        assert kwargs['baudrate'] == 115200
        assert kwargs['timeout'] == PURGE_READ_WINDOW

    def test_baud_alias_and_timeout_key(self):
        transport = SerialTransport({'port': 'COM3', 'baud': '9600', 'timeout': 5})
        transport.connect()

        kwargs = self.mock_serial_cls.call_args.kwargs
        assert kwargs['baudrate'] == 9600
        assert kwargs['timeout'] == PURGE_READ_WINDOW

    def test_connect_purges_stale_data(self):
        self.mock_port.read.side_effect = [b'Alien>', b'garbage', b'']
        transport = SerialTransport({'port': '/dev/ttyS0'})
        transport.connect()

        self.mock_port.write.assert_called_once_with(b'\r\n')
        assert self.mock_port.read.call_count == 3
        assert self.mock_port.reset_input_buffer.call_count == 2

    def test_connect_failure(self):
        self.mock_serial_cls.side_effect = serial.SerialException("could not open port")
        transport = SerialTransport({'port': '/dev/missing'})

        with pytest.raises(SerialConnectionError) as excinfo:
            transport.connect()
        assert excinfo.value.port == '/dev/missing'
        assert not transport.is_connected()

    def test_write(self):
        transport = SerialTransport({'port': '/dev/ttyS0'})
        transport.connect()
        self.mock_port.write.reset_mock()

        assert transport.write(b'\x01get Time\r\n', timeout=2.0) == 11
        self.mock_port.write.assert_called_once_with(b'\x01get Time\r\n')
        assert self.mock_port.write_timeout == 2.0

    def test_write_timeout(self):
        transport = SerialTransport({'port': '/dev/ttyS0'})
        transport.connect()
        self.mock_port.write.side_effect = serial.SerialTimeoutException("Write timeout")

        with pytest.raises(TimeoutError):
            transport.write(b'\x01get Time\r\n', timeout=0.1)

    def test_write_error(self):
        transport = SerialTransport({'port': '/dev/ttyS0'})
        transport.connect()
        self.mock_port.write.side_effect = serial.SerialException("device reports readiness to read but returned no data")

        with pytest.raises(WriteError):
            transport.write(b'\x01get Time\r\n')

    def test_read_until(self):
        transport = SerialTransport({'port': '/dev/ttyS0'})
        transport.connect()
        self.mock_port.read_until.return_value = b'PersistTime = 5\r\n\x00'

        assert transport.read_until('\x00', timeout=1.0) == 'PersistTime = 5\r\n'
        self.mock_port.read_until.assert_called_once_with(b'\x00')
        assert self.mock_port.timeout == 1.0

    def test_read_until_timeout(self):
        transport = SerialTransport({'port': '/dev/ttyS0'})
        transport.connect()
        self.mock_port.read_until.return_value = b'PersistTi'

        with pytest.raises(TimeoutError):
            transport.read_until('\x00', timeout=1.0)

    def test_io_requires_connection(self):
        transport = SerialTransport({'port': '/dev/ttyS0'})
        with pytest.raises(ConnectionError):
            transport.write(b'\r\n')

    def test_disconnect(self):
        transport = SerialTransport({'port': '/dev/ttyS0'})
        transport.connect()
        transport.disconnect()

        self.mock_port.close.assert_called_once()
        assert not transport.is_connected()
        transport.disconnect()
        self.mock_port.close.assert_called_once()
