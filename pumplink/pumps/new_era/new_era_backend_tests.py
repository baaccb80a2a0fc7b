import unittest
from unittest.mock import Mock, call, patch

import serial

from pumplink.config import Config
from pumplink.io.registry import PortRegistry
from pumplink.io.serial import Serial
from pumplink.machines.backend import MachineBackend
from pumplink.pumps.backend import ConnectionState
from pumplink.pumps.commands import DirectionArgs, RateArgs, RunArgs, StopArgs
from pumplink.pumps.errors import (
  InvalidParameter,
  NotConnected,
  PortOpenFailed,
  PortUnavailable,
  TransportError,
)
from pumplink.pumps.new_era import NewEraBackend


class NewEraBackendTests(unittest.IsolatedAsyncioTestCase):
  """ Tests for the New Era backend, with the serial port mocked out. """

  def make_backend(self, port: str = "COM8", **kwargs) -> NewEraBackend:
    kwargs.setdefault("settle_time", 0)
    kwargs.setdefault("connect_delay", 0)
    backend = NewEraBackend(port=port, registry=self.registry, **kwargs)
    backend.io = Mock(spec=Serial)
    backend.io.is_open = True
    backend.io.read_available.return_value = b""
    return backend

  async def asyncSetUp(self):
    await super().asyncSetUp()
    self.registry = PortRegistry()
    self.backend = self.make_backend()

  async def test_serial_settings(self):
    backend = NewEraBackend(port="/dev/ttyUSB0", registry=self.registry)
    self.assertEqual(backend.io.baudrate, 19200)
    self.assertEqual(backend.io.bytesize, serial.EIGHTBITS)
    self.assertEqual(backend.io.parity, serial.PARITY_NONE)
    self.assertEqual(backend.io.stopbits, serial.STOPBITS_ONE)
    self.assertFalse(backend.io.rtscts)
    self.assertEqual(backend.io.terminator, b"\r")

  def test_port_must_be_string(self):
    with self.assertRaises(ValueError):
      NewEraBackend(port=8)  # type: ignore[arg-type]

  async def test_setup_and_stop(self):
    self.assertEqual(self.backend.state, ConnectionState.DISCONNECTED)
    await self.backend.setup()
    self.assertEqual(self.backend.state, ConnectionState.OPEN)
    self.assertTrue(self.registry.is_claimed("COM8"))
    self.backend.io.setup.assert_awaited_once()

    await self.backend.stop()
    self.assertEqual(self.backend.state, ConnectionState.CLOSED)
    self.assertFalse(self.registry.is_claimed("COM8"))
    self.backend.io.stop.assert_awaited_once()

    # stopping again is a no-op
    await self.backend.stop()
    self.backend.io.stop.assert_awaited_once()

  async def test_connect_delay(self):
    backend = self.make_backend(connect_delay=2.0)
    with patch("pumplink.pumps.new_era.new_era_backend.asyncio.sleep") as sleep:
      await backend.setup()
    sleep.assert_awaited_once_with(2.0)

  async def test_port_in_use(self):
    await self.backend.setup()
    other = self.make_backend()
    with self.assertRaises(PortUnavailable):
      await other.setup()
    other.io.setup.assert_not_awaited()
    self.assertEqual(other.state, ConnectionState.DISCONNECTED)

    # once released, the port can be claimed again
    await self.backend.stop()
    await other.setup()
    self.assertEqual(other.state, ConnectionState.OPEN)
    await other.stop()

  async def test_setup_twice(self):
    await self.backend.setup()
    with self.assertRaises(PortUnavailable):
      await self.backend.setup()
    self.assertEqual(self.backend.state, ConnectionState.OPEN)
    await self.backend.stop()

  async def test_port_open_failed(self):
    self.backend.io.setup.side_effect = serial.SerialException("could not open port")
    with self.assertRaises(PortOpenFailed):
      await self.backend.setup()
    self.assertEqual(self.backend.state, ConnectionState.DISCONNECTED)
    self.assertFalse(self.registry.is_claimed("COM8"))

  async def test_reopen_after_stop(self):
    await self.backend.setup()
    await self.backend.stop()
    await self.backend.setup()
    self.assertEqual(self.backend.state, ConnectionState.OPEN)
    await self.backend.stop()

  async def test_send_command(self):
    await self.backend.setup()
    self.backend.io.reset_mock()
    self.backend.io.read_available.return_value = b"\x0200S\x03"

    response = await self.backend.send_command("RUN", address=5)

    self.assertEqual(response, "\x0200S\x03")
    self.assertEqual(self.backend.io.mock_calls, [
      call.write_line(b"05RUN"),
      call.read_available(),
    ])
    await self.backend.stop()

  async def test_settle_time(self):
    backend = self.make_backend(settle_time=0.5)
    await backend.setup()
    with patch("pumplink.pumps.new_era.new_era_backend.asyncio.sleep") as sleep:
      await backend.send_command("VER")
    sleep.assert_awaited_once_with(0.5)
    await backend.stop()

  async def test_empty_response(self):
    await self.backend.setup()
    self.assertEqual(await self.backend.send_command("DIS"), "")
    await self.backend.stop()

  async def test_exchanges_in_order(self):
    await self.backend.setup()
    self.backend.io.reset_mock()

    await self.backend.execute(StopArgs(address=12))
    await self.backend.execute(RunArgs(address=12))

    self.assertEqual(self.backend.io.mock_calls, [
      call.write_line(b"12STP"),
      call.read_available(),
      call.write_line(b"12RUN"),
      call.read_available(),
    ])
    await self.backend.stop()

  async def test_invalid_parameter_sends_nothing(self):
    await self.backend.setup()
    self.backend.io.reset_mock()
    with self.assertRaises(InvalidParameter):
      await self.backend.execute(DirectionArgs(value="XYZ"))
    self.backend.io.write_line.assert_not_awaited()
    self.backend.io.write.assert_not_awaited()
    await self.backend.stop()

  async def test_strict_units(self):
    backend = self.make_backend(strict_units=True)
    await backend.setup()
    with self.assertRaises(InvalidParameter):
      await backend.execute(RateArgs(value=1, unit="XX"))
    backend.io.write_line.assert_not_awaited()
    await backend.stop()

  async def test_not_connected(self):
    with self.assertRaises(NotConnected):
      await self.backend.send_command("RUN")
    await self.backend.setup()
    await self.backend.stop()
    with self.assertRaises(NotConnected):
      await self.backend.send_command("RUN")
    with self.assertRaises(NotConnected):
      await self.backend.execute(DirectionArgs(value="XYZ"))
    self.backend.io.write_line.assert_not_awaited()

  async def test_transport_closed(self):
    await self.backend.setup()
    self.backend.io.is_open = False
    with self.assertRaises(TransportError):
      await self.backend.send_command("RUN")
    self.backend.io.write_line.assert_not_awaited()
    await self.backend.stop()

  async def test_transport_failure(self):
    await self.backend.setup()
    self.backend.io.write_line.side_effect = serial.SerialTimeoutException("write timeout")
    with self.assertRaises(TransportError):
      await self.backend.send_command("RUN")
    self.backend.io.read_available.assert_not_awaited()

    self.backend.io.write_line.side_effect = None
    self.backend.io.read_available.side_effect = serial.SerialException("device disconnected")
    with self.assertRaises(TransportError):
      await self.backend.send_command("RUN")
    await self.backend.stop()

  def test_from_config(self):
    config = Config(pump=Config.Pump(settle_time=0.1, connect_delay=0.2, strict_units=True))
    backend = NewEraBackend.from_config("COM3", config=config, registry=self.registry)
    self.assertEqual(backend.settle_time, 0.1)
    self.assertEqual(backend.connect_delay, 0.2)
    self.assertTrue(backend.strict_units)
    self.assertIs(backend.registry, self.registry)

  def test_serialize(self):
    backend = NewEraBackend(port="COM3", settle_time=0.25, registry=self.registry)
    data = backend.serialize()
    self.assertEqual(data, {
      "type": "NewEraBackend",
      "strict_units": False,
      "port": "COM3",
      "settle_time": 0.25,
      "connect_delay": 2.0,
    })
    copy = MachineBackend.deserialize(data)
    self.assertIsInstance(copy, NewEraBackend)
    self.assertEqual(copy.serialize(), data)


if __name__ == "__main__":
  unittest.main()
