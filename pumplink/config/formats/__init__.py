""" ConfigLoaders read a Config from an opened text stream. """

from abc import ABC, abstractmethod
from typing import IO, List

from pumplink.config.config import Config


class ConfigLoader(ABC):
  """ConfigLoader is an abstract class for loading a Config object from a stream. """

  extension: str

  @abstractmethod
  def load(self, r: IO) -> Config:
    """ Load a Config object."""


class MultiLoader(ConfigLoader):
  """A ConfigLoader that tries each of its loaders in turn, from the start of the stream."""

  def __init__(self, loaders: List[ConfigLoader]):
    self.loaders = loaders

  @property
  def extensions(self) -> List[str]:
    return [loader.extension for loader in self.loaders]

  # Unknown what the Exception will be when trying to load the stream so catch all and move on.
  def load(self, r: IO) -> Config:
    for loader in self.loaders:
      r.seek(0)
      try:
        return loader.load(r)
      except Exception: # pylint: disable=broad-except
        continue
    raise ValueError("No loader could load file.")
