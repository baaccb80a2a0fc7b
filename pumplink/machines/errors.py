class ConnectionStateError(Exception):
  """ Raised when the connection to a machine is not in the state an operation requires. """


class NotConnected(ConnectionStateError):
  """ Raised when an operation is attempted on a machine that is not set up, or was stopped. """


class PortUnavailable(ConnectionStateError):
  """ Raised when the port is already claimed by another open session. """


class PortOpenFailed(ConnectionStateError):
  """ Raised when the port could not be opened. """
