import logging
import threading
from typing import Dict, List

logger = logging.getLogger(__name__)


class PortRegistry:
  """Tracks which serial ports are claimed by an open session.

  A port can be claimed by at most one owner at a time. `claim` and `release` are atomic, so two
  sessions racing for the same port can never both succeed.
  """

  def __init__(self):
    self._lock = threading.Lock()
    self._claims: Dict[str, object] = {}

  def claim(self, port: str, owner: object) -> bool:
    """Claim `port` for `owner`.

    Returns:
      True if the port was free (or already claimed by `owner`), False if another owner holds it.
    """

    with self._lock:
      current = self._claims.get(port)
      if current is not None and current is not owner:
        return False
      self._claims[port] = owner
    logger.debug("claimed port %s", port)
    return True

  def release(self, port: str, owner: object) -> None:
    """Release `port` if it is held by `owner`. Releasing an unclaimed port is a no-op."""

    with self._lock:
      if self._claims.get(port) is owner:
        del self._claims[port]
        logger.debug("released port %s", port)

  def is_claimed(self, port: str) -> bool:
    with self._lock:
      return port in self._claims

  @property
  def claimed_ports(self) -> List[str]:
    with self._lock:
      return list(self._claims)


# Shared by backends that are not given a registry of their own.
DEFAULT_PORT_REGISTRY = PortRegistry()
