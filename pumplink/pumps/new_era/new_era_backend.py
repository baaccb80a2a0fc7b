import asyncio
import logging
from typing import Optional

import serial

from pumplink import CONFIG
from pumplink.config import Config
from pumplink.io.registry import DEFAULT_PORT_REGISTRY, PortRegistry
from pumplink.io.serial import Serial
from pumplink.machines.errors import PortOpenFailed, PortUnavailable
from pumplink.pumps.backend import SyringePumpBackend
from pumplink.pumps.errors import TransportError

logger = logging.getLogger(__name__)


class NewEraBackend(SyringePumpBackend):
  """Backend for New Era syringe pumps (NE-300, NE-500, NE-1000 and compatible) over RS-232.

  Several pumps can share one serial line. Each one is selected with the `address` argument of a
  command; commands without an address go to the pump directly attached to the port.

  Every command is written, then the backend waits `settle_time` seconds and returns whatever the
  pump has sent back by then. Responses are not parsed.

  Documentation available at:
    - https://www.syringepump.com/download/NE-1000%20Syringe%20Pump%20User%20Manual.pdf
  """

  BAUDRATE = 19200
  BYTESIZE = serial.EIGHTBITS
  PARITY = serial.PARITY_NONE
  STOPBITS = serial.STOPBITS_ONE
  RTSCTS = False
  TERMINATOR = b"\r"

  def __init__(
    self,
    port: str,
    settle_time: float = 0.5,
    connect_delay: float = 2.0,
    strict_units: bool = False,
    registry: Optional[PortRegistry] = None,
  ):
    """
    Args:
      port: serial port the pump is connected to, e.g. "COM8" or "/dev/ttyUSB0".
      settle_time: seconds to wait after writing a command before reading the response.
      connect_delay: seconds to wait after opening the port before the pump is used.
      strict_units: raise on an unknown rate unit instead of dropping it from the command.
      registry: the registry in which the port is claimed while the backend is open. Defaults to
        a registry shared by all backends in this process.
    """

    super().__init__(strict_units=strict_units)
    if not isinstance(port, str):
      raise ValueError(f"Port must be a string, e.g. 'COM8', got {port!r}")
    if settle_time < 0 or connect_delay < 0:
      raise ValueError("settle_time and connect_delay must be non-negative")
    self.port = port
    self.settle_time = settle_time
    self.connect_delay = connect_delay
    self.registry = registry if registry is not None else DEFAULT_PORT_REGISTRY
    self.io = Serial(
      port=self.port,
      baudrate=self.BAUDRATE,
      bytesize=self.BYTESIZE,
      parity=self.PARITY,
      stopbits=self.STOPBITS,
      rtscts=self.RTSCTS,
      terminator=self.TERMINATOR,
    )

  @classmethod
  def from_config(
    cls,
    port: str,
    config: Optional[Config] = None,
    registry: Optional[PortRegistry] = None,
  ) -> "NewEraBackend":
    """Create a backend with the timing and validation settings of `config` (default: the loaded
    pumplink config)."""

    pump_config = (config or CONFIG).pump
    return cls(
      port=port,
      settle_time=pump_config.settle_time,
      connect_delay=pump_config.connect_delay,
      strict_units=pump_config.strict_units,
      registry=registry,
    )

  async def open_connection(self):
    if not self.registry.claim(self.port, owner=self):
      raise PortUnavailable(f"Port {self.port} is already used by another pump session")

    try:
      try:
        await self.io.setup()
      except (serial.SerialException, OSError) as e:
        logger.error("Could not open port %s: %s", self.port, e)
        raise PortOpenFailed(f"Could not open port: {self.port}") from e

      # The pump does not answer a handshake, give it time to settle instead.
      logger.info("Attempting connection to %s", self.port)
      await asyncio.sleep(self.connect_delay)
    except BaseException:
      await self.io.stop()
      self.registry.release(self.port, owner=self)
      raise

    logger.info("Port %s successfully connected", self.port)

  async def close_connection(self):
    try:
      await self.io.stop()
    finally:
      self.registry.release(self.port, owner=self)
    logger.info("Port %s closed", self.port)

  async def exchange(self, command: str) -> str:
    """Write `command`, wait `settle_time` and read every byte the pump has sent back.

    Raises:
      TransportError: if the port is closed or reading/writing fails.
    """

    if not self.io.is_open:
      raise TransportError(f"Port {self.port} is not open")

    logger.debug("[%s] sending %r", self.port, command)
    try:
      await self.io.write_line(command.encode("ascii"))
      await asyncio.sleep(self.settle_time)
      data = await self.io.read_available()
    except (serial.SerialException, OSError) as e:
      raise TransportError(f"Exchange of {command!r} on {self.port} failed: {e}") from e

    response = data.decode("ascii", errors="replace")
    logger.debug("[%s] received %r", self.port, response)
    return response

  def serialize(self) -> dict:
    return {
      **super().serialize(),
      "port": self.port,
      "settle_time": self.settle_time,
      "connect_delay": self.connect_delay,
    }
