from pumplink.machines.errors import (
  ConnectionStateError,
  NotConnected,
  PortOpenFailed,
  PortUnavailable,
)


class PumpError(Exception):
  """ Base class for errors raised while building or exchanging pump commands. """


class UnknownCommand(PumpError, KeyError):
  """ Raised when a command kind has no mnemonic in the command table. """


class InvalidParameter(PumpError, ValueError):
  """ Raised when a value, direction or unit is outside the domain of a command. """


class TransportError(PumpError, IOError):
  """ Raised when the transport is closed or a write/read on it fails. """


__all__ = [
  "ConnectionStateError",
  "InvalidParameter",
  "NotConnected",
  "PortOpenFailed",
  "PortUnavailable",
  "PumpError",
  "TransportError",
  "UnknownCommand",
]
