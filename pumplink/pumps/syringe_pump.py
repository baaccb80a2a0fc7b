from typing import Optional

from pumplink.machines.machine import Machine, need_setup_finished
from pumplink.pumps.backend import SyringePumpBackend
from pumplink.pumps.commands import (
  Address,
  ClearDispenseArgs,
  CommandArgs,
  DiameterArgs,
  DirectionArgs,
  DirectionLike,
  DispensedArgs,
  RateArgs,
  RateUnitLike,
  RunArgs,
  SafeModeArgs,
  StopArgs,
  VersionArgs,
  VolumeArgs,
)


class SyringePump(Machine):
  """ Frontend for a syringe pump.

  Every command returns the raw response of the pump. Settable parameters (diameter, rate, volume
  and direction) are queried by calling them without a value.

  Commands are sent to `address` unless a call passes its own. With no address at all, the command
  goes to the pump directly attached to the port.

  Examples:
    Set up a pump and infuse 1.5 ml at 2 ml/min:

    >>> async with SyringePump(backend=NewEraBackend(port="COM8")) as pump:
    ...   await pump.diameter(value=14.57)
    ...   await pump.direction(value="INF")
    ...   await pump.rate(value=2, unit="MM")
    ...   await pump.volume(value=1.5)
    ...   await pump.run()
  """

  def __init__(self, backend: SyringePumpBackend, address: Optional[Address] = None):
    super().__init__(backend=backend)
    self.backend: SyringePumpBackend = backend  # fix type
    self.address = address

  def serialize(self) -> dict:
    return {**super().serialize(), "address": self.address}

  def _args_address(self, address: Optional[Address]) -> Optional[Address]:
    return self.address if address is None else address

  @need_setup_finished
  async def execute(self, args: CommandArgs) -> str:
    """ Send a command built from typed arguments and return the raw response. """
    return await self.backend.execute(args)

  async def diameter(self, value: Optional[float] = None, address: Optional[Address] = None) -> str:
    """ Set or query the syringe inner diameter.

    Args:
      value: diameter in millimeters. If None, the current diameter is queried.
      address: pump address on a multi-drop line.
    """

    return await self.execute(DiameterArgs(value=value, address=self._args_address(address)))

  async def rate(
    self,
    value: Optional[float] = None,
    unit: Optional[RateUnitLike] = None,
    address: Optional[Address] = None,
  ) -> str:
    """ Set or query the pumping rate.

    Args:
      value: pumping rate. If None, the current rate is queried.
      unit: one of "UM" (ul/min), "MM" (ml/min), "UH" (ul/h) or "MH" (ml/h). Unknown units are left
        out of the command unless the backend uses strict units.
      address: pump address on a multi-drop line.
    """

    return await self.execute(
      RateArgs(value=value, unit=unit, address=self._args_address(address)))

  async def volume(self, value: Optional[float] = None, address: Optional[Address] = None) -> str:
    """ Set or query the volume to dispense, in the volume units of the pump. """

    return await self.execute(VolumeArgs(value=value, address=self._args_address(address)))

  async def direction(
    self,
    value: Optional[DirectionLike] = None,
    address: Optional[Address] = None,
  ) -> str:
    """ Set or query the pumping direction.

    Args:
      value: "INF" (infuse), "WDR" (withdraw) or "REV" (reverse the current direction), in any
        case. If None, the current direction is queried.
      address: pump address on a multi-drop line.

    Raises:
      InvalidParameter: if `value` is not a valid direction.
    """

    return await self.execute(DirectionArgs(value=value, address=self._args_address(address)))

  async def run(self, address: Optional[Address] = None) -> str:
    """ Start pumping. """
    return await self.execute(RunArgs(address=self._args_address(address)))

  async def stop_pumping(self, address: Optional[Address] = None) -> str:
    """ Stop pumping. To close the connection, use `stop`. """
    return await self.execute(StopArgs(address=self._args_address(address)))

  async def version(self, address: Optional[Address] = None) -> str:
    """ Query the firmware version. """
    return await self.execute(VersionArgs(address=self._args_address(address)))

  async def dispensed(self, address: Optional[Address] = None) -> str:
    """ Query the infused and withdrawn volumes. """
    return await self.execute(DispensedArgs(address=self._args_address(address)))

  async def clear_dispense(self, direction: DirectionLike, address: Optional[Address] = None) -> str:
    """ Clear the infused ("INF") or withdrawn ("WDR") volume counter. """
    return await self.execute(
      ClearDispenseArgs(direction=direction, address=self._args_address(address)))

  async def safe_mode(self, address: Optional[Address] = None) -> str:
    """ Query the safe mode communication timeout. """
    return await self.execute(SafeModeArgs(address=self._args_address(address)))
