import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, cast

import serial

from pumplink.io.io import LOG_LEVEL_IO, IOBase

logger = logging.getLogger(__name__)


class Serial(IOBase):
  """Thin wrapper around serial.Serial to include pumplink logging.

  All blocking pyserial calls run on a single worker thread, so calls on one `Serial` are executed
  in the order they are awaited.
  """

  def __init__(
    self,
    port: str,
    baudrate: int = 9600,
    bytesize: int = 8,  # serial.EIGHTBITS
    parity: str = "N",  # serial.PARITY_NONE
    stopbits: int = 1,  # serial.STOPBITS_ONE,
    write_timeout=1,
    timeout=1,
    rtscts: bool = False,
    terminator: bytes = b"",
  ):
    self._port = port
    self.baudrate = baudrate
    self.bytesize = bytesize
    self.parity = parity
    self.stopbits = stopbits
    self._ser: Optional[serial.Serial] = None
    self._executor: Optional[ThreadPoolExecutor] = None
    self.write_timeout = write_timeout
    self.timeout = timeout
    self.rtscts = rtscts
    self.terminator = terminator

  @property
  def port(self) -> str:
    return self._port

  @property
  def is_open(self) -> bool:
    return self._ser is not None and self._ser.is_open

  async def setup(self):
    loop = asyncio.get_running_loop()
    self._executor = ThreadPoolExecutor(max_workers=1)

    def _open_serial() -> serial.Serial:
      return serial.Serial(
        port=self._port,
        baudrate=self.baudrate,
        bytesize=self.bytesize,
        parity=self.parity,
        stopbits=self.stopbits,
        write_timeout=self.write_timeout,
        timeout=self.timeout,
        rtscts=self.rtscts,
      )

    try:
      self._ser = await loop.run_in_executor(self._executor, _open_serial)
    except serial.SerialException as e:
      logger.error("Could not connect to device, is it in use by a different process?")
      if self._executor is not None:
        self._executor.shutdown(wait=True)
        self._executor = None
      raise e

  async def stop(self):
    if self._ser is not None and self._ser.is_open:
      loop = asyncio.get_running_loop()
      if self._executor is None:
        raise RuntimeError("Call setup() first.")
      await loop.run_in_executor(self._executor, self._ser.close)
    self._ser = None
    if self._executor is not None:
      self._executor.shutdown(wait=True)
      self._executor = None

  async def write(self, data: bytes):
    assert self._ser is not None, "forgot to call setup?"
    loop = asyncio.get_running_loop()
    if self._executor is None:
      raise RuntimeError("Call setup() first.")
    await loop.run_in_executor(self._executor, self._ser.write, data)
    logger.log(LOG_LEVEL_IO, "[%s] write %s", self._port, data)

  async def write_line(self, data: bytes):
    """Write `data` followed by the configured line terminator."""
    await self.write(data + self.terminator)

  async def read(self, num_bytes: int = 1) -> bytes:
    assert self._ser is not None, "forgot to call setup?"
    loop = asyncio.get_running_loop()
    if self._executor is None:
      raise RuntimeError("Call setup() first.")
    data = await loop.run_in_executor(self._executor, self._ser.read, num_bytes)
    logger.log(LOG_LEVEL_IO, "[%s] read %s", self._port, data)
    return cast(bytes, data)

  async def read_available(self) -> bytes:
    """Read every byte currently waiting in the input buffer, without blocking for more."""
    assert self._ser is not None, "forgot to call setup?"
    loop = asyncio.get_running_loop()
    if self._executor is None:
      raise RuntimeError("Call setup() first.")

    def _read_available(ser: serial.Serial) -> bytes:
      num_bytes = ser.in_waiting
      if num_bytes == 0:
        return b""
      return cast(bytes, ser.read(num_bytes))

    data = await loop.run_in_executor(self._executor, _read_available, self._ser)
    logger.log(LOG_LEVEL_IO, "[%s] read_available %s", self._port, data)
    return data

  def serialize(self):
    return {
      "port": self._port,
      "baudrate": self.baudrate,
      "bytesize": self.bytesize,
      "parity": self.parity,
      "stopbits": self.stopbits,
      "write_timeout": self.write_timeout,
      "timeout": self.timeout,
      "rtscts": self.rtscts,
      "terminator": self.terminator.decode("ascii"),
    }

  @classmethod
  def deserialize(cls, data: dict) -> "Serial":
    return cls(
      port=data["port"],
      baudrate=data["baudrate"],
      bytesize=data["bytesize"],
      parity=data["parity"],
      stopbits=data["stopbits"],
      write_timeout=data["write_timeout"],
      timeout=data["timeout"],
      rtscts=data["rtscts"],
      terminator=data.get("terminator", "").encode("ascii"),
    )
