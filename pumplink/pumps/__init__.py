from .backend import ConnectionState, SyringePumpBackend
from .chatterbox import SyringePumpChatterboxBackend
from .commands import (
  MNEMONICS,
  ClearDispenseArgs,
  CommandArgs,
  CommandKind,
  DiameterArgs,
  Direction,
  DirectionArgs,
  DispensedArgs,
  RateArgs,
  RateUnit,
  RunArgs,
  SafeModeArgs,
  StopArgs,
  VersionArgs,
  VolumeArgs,
  address_command,
  encode_command,
)
from .errors import (
  ConnectionStateError,
  InvalidParameter,
  NotConnected,
  PortOpenFailed,
  PortUnavailable,
  PumpError,
  TransportError,
  UnknownCommand,
)
from .new_era import NewEraBackend
from .syringe_pump import SyringePump
