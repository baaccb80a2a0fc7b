from .io import LOG_LEVEL_IO, IOBase
from .registry import DEFAULT_PORT_REGISTRY, PortRegistry
from .serial import Serial
