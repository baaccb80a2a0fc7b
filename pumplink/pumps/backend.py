import asyncio
import enum
from abc import ABCMeta, abstractmethod
from typing import Optional

from pumplink.machines.backend import MachineBackend
from pumplink.machines.errors import NotConnected, PortUnavailable
from pumplink.pumps.commands import Address, CommandArgs, address_command


class ConnectionState(enum.Enum):
  DISCONNECTED = "disconnected"
  CONNECTING = "connecting"
  OPEN = "open"
  CLOSED = "closed"


class SyringePumpBackend(MachineBackend, metaclass=ABCMeta):
  """ Abstract base class for syringe pump backends.

  The backend owns the connection and its state. Subclasses implement how the connection is opened
  and closed, and how a single command is exchanged; this class makes sure commands are only sent
  while the connection is open, and never more than one at a time.
  """

  def __init__(self, strict_units: bool = False):
    self.strict_units = strict_units
    self._state = ConnectionState.DISCONNECTED
    self._exchange_lock = asyncio.Lock()

  @property
  def state(self) -> ConnectionState:
    return self._state

  @property
  def is_open(self) -> bool:
    return self._state == ConnectionState.OPEN

  @abstractmethod
  async def open_connection(self):
    """ Open the connection to the pump. """

  @abstractmethod
  async def close_connection(self):
    """ Close the connection to the pump. """

  @abstractmethod
  async def exchange(self, command: str) -> str:
    """ Send a complete command and return the raw response. """

  async def setup(self):
    """ Open the connection.

    Raises:
      PortUnavailable: if this backend is already connecting or open.
    """

    if self._state in (ConnectionState.CONNECTING, ConnectionState.OPEN):
      raise PortUnavailable(f"{type(self).__name__} is already {self._state.value}")
    previous_state = self._state
    self._state = ConnectionState.CONNECTING
    try:
      await self.open_connection()
    except BaseException:
      self._state = previous_state
      raise
    self._state = ConnectionState.OPEN

  async def stop(self):
    """ Close the connection. Stopping a backend that is not open is a no-op. """

    if self._state != ConnectionState.OPEN:
      return
    try:
      await self.close_connection()
    finally:
      self._state = ConnectionState.CLOSED

  def check_open(self):
    if self._state != ConnectionState.OPEN:
      raise NotConnected(f"{type(self).__name__} is {self._state.value}, call setup() first")

  async def send_command(self, command: str, address: Optional[Address] = None) -> str:
    """ Send an encoded command, optionally prefixed with a pump address, and return the response.

    Raises:
      NotConnected: if the connection is not open.
    """

    self.check_open()
    command = address_command(command, address)
    async with self._exchange_lock:
      return await self.exchange(command)

  async def execute(self, args: CommandArgs) -> str:
    """ Encode `args` and send them. Nothing is sent if encoding fails. """

    self.check_open()
    body = args.body(strict_units=self.strict_units)
    return await self.send_command(body, address=args.address)

  def serialize(self) -> dict:
    return {**super().serialize(), "strict_units": self.strict_units}
