import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pumplink.io.io import LOG_LEVEL_IO

LOG_FROM_STRING = {
  "IO": LOG_LEVEL_IO,
  "DEBUG": logging.DEBUG,
  "INFO": logging.INFO,
  "WARNING": logging.WARNING,
  "ERROR": logging.ERROR,
  "CRITICAL": logging.CRITICAL,
}

TRUE_STRINGS = ("1", "true", "yes", "on")


def parse_bool(value) -> bool:
  if isinstance(value, bool):
    return value
  return str(value).strip().lower() in TRUE_STRINGS


@dataclass
class Config:
  """The configuration object for pumplink."""

  @dataclass
  class Logging:
    """The logging configuration."""

    level: int = logging.INFO
    log_dir: Optional[Path] = None

  @dataclass
  class Pump:
    """Timing and validation settings shared by all pump backends.

    Attributes:
      settle_time: seconds to wait after writing a command before reading the response.
      connect_delay: seconds to wait after opening the port before the pump is used.
      strict_units: raise on an unknown rate unit instead of dropping it from the command.
    """

    settle_time: float = 0.5
    connect_delay: float = 2.0
    strict_units: bool = False

  logging: Logging = field(default_factory=Logging)
  pump: Pump = field(default_factory=Pump)

  @classmethod
  def from_dict(cls, d: dict) -> "Config":
    """Build a Config from `{"logging": {...}, "pump": {...}}`. Missing sections and keys keep
    their defaults; values may be strings, as read from an INI file."""

    logging_data = d.get("logging", {})
    pump_data = d.get("pump", {})
    defaults = cls.Pump()
    level = str(logging_data.get("level", "INFO")).upper()
    if level not in LOG_FROM_STRING:
      raise ValueError(f"Unknown log level {level!r}")
    return cls(
      logging=cls.Logging(
        level=LOG_FROM_STRING[level],
        log_dir=Path(logging_data["log_dir"]) if logging_data.get("log_dir") else None,
      ),
      pump=cls.Pump(
        settle_time=float(pump_data.get("settle_time", defaults.settle_time)),
        connect_delay=float(pump_data.get("connect_delay", defaults.connect_delay)),
        strict_units=parse_bool(pump_data.get("strict_units", defaults.strict_units)),
      ),
    )
