"""Command encoding for the New Era syringe pump ASCII dialect.

A command on the wire is ``[AA]MMM[ VVVV[ UU]]``: an optional two digit pump address, a three
letter mnemonic, an optional value and, for the pumping rate, an optional unit. Every function in
this module is pure; nothing here talks to a pump.
"""

import enum
import logging
import math
from dataclasses import dataclass
from numbers import Integral, Real
from types import MappingProxyType
from typing import ClassVar, Dict, Mapping, Optional, Tuple, Union

from pumplink.pumps.errors import InvalidParameter, UnknownCommand

logger = logging.getLogger(__name__)


class CommandKind(enum.Enum):
  DIAMETER = "diameter"
  RUN = "run"
  STOP = "stop"
  RATE = "rate"
  VOLUME = "volume"
  DIRECTION = "direction"
  CLEAR_DISPENSE = "clear_dispense"
  DISPENSED = "dispensed"
  SAFE_MODE = "safe_mode"
  VERSION = "version"


MNEMONICS: Mapping[CommandKind, str] = MappingProxyType({
  CommandKind.DIAMETER: "DIA",
  CommandKind.RUN: "RUN",
  CommandKind.STOP: "STP",
  CommandKind.RATE: "RAT",
  CommandKind.VOLUME: "VOL",
  CommandKind.DIRECTION: "DIR",
  CommandKind.CLEAR_DISPENSE: "CLD",
  CommandKind.DISPENSED: "DIS",
  CommandKind.SAFE_MODE: "SAF",
  CommandKind.VERSION: "VER",
})


class Direction(str, enum.Enum):
  INFUSE = "INF"
  WITHDRAW = "WDR"
  REVERSE = "REV"


class RateUnit(str, enum.Enum):
  MICROLITERS_PER_MINUTE = "UM"
  MILLILITERS_PER_MINUTE = "MM"
  MICROLITERS_PER_HOUR = "UH"
  MILLILITERS_PER_HOUR = "MH"


DirectionLike = Union[Direction, str]
RateUnitLike = Union[RateUnit, str]
Address = Union[int, float]

# (lower bound, decimals), checked in order. Values below the last bound get 3 decimals.
_DECIMAL_TIERS: Dict[CommandKind, Tuple[Tuple[float, int], ...]] = {
  CommandKind.DIAMETER: ((100, 1), (10, 2)),
  CommandKind.VOLUME: ((100, 1), (10, 2)),
  CommandKind.RATE: ((1000, 0), (100, 1), (10, 2)),
}
_MIN_DECIMALS = 3

_ALLOWED_DIRECTIONS: Dict[CommandKind, Tuple[Direction, ...]] = {
  CommandKind.DIRECTION: (Direction.INFUSE, Direction.WITHDRAW, Direction.REVERSE),
  CommandKind.CLEAR_DISPENSE: (Direction.INFUSE, Direction.WITHDRAW),
}


def mnemonic(kind: CommandKind) -> str:
  """Return the three letter mnemonic for `kind`.

  Raises:
    UnknownCommand: if `kind` has no entry in the command table.
  """

  try:
    return MNEMONICS[kind]
  except (KeyError, TypeError) as e:
    raise UnknownCommand(f"No mnemonic for command {kind!r}") from e


def _check_number(value, what: str) -> float:
  if isinstance(value, bool) or not isinstance(value, Real):
    raise InvalidParameter(f"{what} must be a number, got {value!r}")
  try:
    value = float(value)
  except OverflowError as e:
    raise InvalidParameter(f"{what} is out of range, got {value!r}") from e
  if not math.isfinite(value):
    raise InvalidParameter(f"{what} must be finite, got {value!r}")
  return value


def decimals_for(kind: CommandKind, value: float) -> int:
  """Number of decimals used to encode `value` for a numeric command.

  The tiers keep the field at four significant digits: a diameter or volume of 100 or more gets one
  decimal, 10 to 100 gets two and anything smaller three. Rates have an extra tier: 1000 or more is
  sent without decimals.
  """

  try:
    tiers = _DECIMAL_TIERS[kind]
  except KeyError as e:
    raise InvalidParameter(f"{mnemonic(kind)} does not take a numeric value") from e
  for lower_bound, decimals in tiers:
    if value >= lower_bound:
      return decimals
  return _MIN_DECIMALS


def format_value(kind: CommandKind, value: float) -> str:
  """Encode a diameter, volume or rate as it is sent to the pump.

  Raises:
    InvalidParameter: if the value is negative, not finite or not a number.
  """

  value = _check_number(value, mnemonic(kind))
  if value < 0:
    raise InvalidParameter(f"{mnemonic(kind)} value must be non-negative, got {value}")
  value = abs(value)  # -0.0 passes the sign check
  decimals = decimals_for(kind, value)
  return f"{value:.{decimals}f}"


def parse_direction(kind: CommandKind, value: DirectionLike) -> Direction:
  """Match a direction token case-insensitively against the directions `kind` allows."""

  allowed = _ALLOWED_DIRECTIONS.get(kind)
  if allowed is None:
    raise InvalidParameter(f"{mnemonic(kind)} does not take a direction")
  token = value.value if isinstance(value, Direction) else value
  if isinstance(token, str):
    for direction in allowed:
      if token.upper() == direction.value:
        return direction
  raise InvalidParameter(
    f"{value!r} is not a valid direction for {mnemonic(kind)}, "
    f"expected one of {', '.join(d.value for d in allowed)}")


def parse_unit(unit: RateUnitLike, strict: bool = False) -> Optional[RateUnit]:
  """Match a rate unit case-insensitively.

  Unknown units are dropped (None is returned) unless `strict` is set, in which case they raise
  `InvalidParameter`.
  """

  token = unit.value if isinstance(unit, RateUnit) else unit
  if isinstance(token, str):
    for rate_unit in RateUnit:
      if token.upper() == rate_unit.value:
        return rate_unit
  if strict:
    raise InvalidParameter(
      f"{unit!r} is not a valid rate unit, expected one of {', '.join(u.value for u in RateUnit)}")
  logger.warning("Ignoring invalid rate unit %r", unit)
  return None


def encode_command(
  kind: CommandKind,
  value: Union[float, DirectionLike, None] = None,
  unit: Optional[RateUnitLike] = None,
  strict_units: bool = False,
) -> str:
  """Build the command body (without address) for `kind`.

  Without a value the bare mnemonic is returned, which queries the current setting of diameter,
  rate, volume and direction, and fires run, stop, dispensed, version and safe mode.

  Args:
    kind: the command to encode.
    value: number for diameter, rate and volume; direction token for direction and clear dispense.
    unit: rate unit, only valid together with a rate value.
    strict_units: raise on an unknown rate unit instead of leaving it out.

  Raises:
    UnknownCommand: `kind` is not in the command table.
    InvalidParameter: a value, direction or unit is out of domain for `kind`.
  """

  fields = [mnemonic(kind)]

  if kind == CommandKind.CLEAR_DISPENSE and value is None:
    raise InvalidParameter("CLD requires a direction to clear")

  if value is not None:
    if kind in _DECIMAL_TIERS:
      fields.append(format_value(kind, value))  # type: ignore[arg-type]
    elif kind in _ALLOWED_DIRECTIONS:
      fields.append(parse_direction(kind, value).value)  # type: ignore[arg-type]
    else:
      raise InvalidParameter(f"{mnemonic(kind)} does not take a value, got {value!r}")

  if unit is not None:
    if kind != CommandKind.RATE:
      raise InvalidParameter(f"{mnemonic(kind)} does not take a unit, got {unit!r}")
    rate_unit = parse_unit(unit, strict=strict_units)
    if rate_unit is not None:
      if value is None:
        raise InvalidParameter("A rate unit can only be sent together with a rate value")
      fields.append(rate_unit.value)

  return " ".join(fields)


def _round_half_away_from_zero(value: float) -> int:
  return int(math.copysign(math.floor(abs(value) + 0.5), value))


def address_prefix(address: Address) -> str:
  """Two digit address field: the address rounded to the nearest integer, modulo 100."""

  if isinstance(address, Integral) and not isinstance(address, bool):
    return f"{int(address) % 100:02d}"
  number = _check_number(address, "Pump address")
  return f"{_round_half_away_from_zero(number) % 100:02d}"


def address_command(command: str, address: Optional[Address] = None) -> str:
  """Prefix `command` with the two digit pump address, or return it unchanged if no address."""

  if address is None:
    return command
  return address_prefix(address) + command


@dataclass(frozen=True, kw_only=True)
class CommandArgs:
  """Arguments of a single pump command. Subclasses set `kind` and add their fields."""

  kind: ClassVar[CommandKind]
  address: Optional[Address] = None

  def body(self, strict_units: bool = False) -> str:
    return encode_command(self.kind)

  def encode(self, strict_units: bool = False) -> str:
    """The complete, addressed command."""
    return address_command(self.body(strict_units=strict_units), self.address)


@dataclass(frozen=True, kw_only=True)
class DiameterArgs(CommandArgs):
  """Syringe inner diameter in millimeters; None queries the current diameter."""

  kind: ClassVar[CommandKind] = CommandKind.DIAMETER
  value: Optional[float] = None

  def body(self, strict_units: bool = False) -> str:
    return encode_command(self.kind, self.value)


@dataclass(frozen=True, kw_only=True)
class RateArgs(CommandArgs):
  kind: ClassVar[CommandKind] = CommandKind.RATE
  value: Optional[float] = None
  unit: Optional[RateUnitLike] = None

  def body(self, strict_units: bool = False) -> str:
    return encode_command(self.kind, self.value, self.unit, strict_units=strict_units)


@dataclass(frozen=True, kw_only=True)
class VolumeArgs(CommandArgs):
  kind: ClassVar[CommandKind] = CommandKind.VOLUME
  value: Optional[float] = None

  def body(self, strict_units: bool = False) -> str:
    return encode_command(self.kind, self.value)


@dataclass(frozen=True, kw_only=True)
class DirectionArgs(CommandArgs):
  kind: ClassVar[CommandKind] = CommandKind.DIRECTION
  value: Optional[DirectionLike] = None

  def body(self, strict_units: bool = False) -> str:
    return encode_command(self.kind, self.value)


@dataclass(frozen=True, kw_only=True)
class ClearDispenseArgs(CommandArgs):
  kind: ClassVar[CommandKind] = CommandKind.CLEAR_DISPENSE
  direction: Optional[DirectionLike] = None

  def body(self, strict_units: bool = False) -> str:
    return encode_command(self.kind, self.direction)


@dataclass(frozen=True, kw_only=True)
class RunArgs(CommandArgs):
  kind: ClassVar[CommandKind] = CommandKind.RUN


@dataclass(frozen=True, kw_only=True)
class StopArgs(CommandArgs):
  kind: ClassVar[CommandKind] = CommandKind.STOP


@dataclass(frozen=True, kw_only=True)
class DispensedArgs(CommandArgs):
  kind: ClassVar[CommandKind] = CommandKind.DISPENSED


@dataclass(frozen=True, kw_only=True)
class SafeModeArgs(CommandArgs):
  kind: ClassVar[CommandKind] = CommandKind.SAFE_MODE


@dataclass(frozen=True, kw_only=True)
class VersionArgs(CommandArgs):
  kind: ClassVar[CommandKind] = CommandKind.VERSION
