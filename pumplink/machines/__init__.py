from .backend import MachineBackend
from .errors import ConnectionStateError, NotConnected, PortOpenFailed, PortUnavailable
from .machine import Machine, need_setup_finished
