import json
from typing import IO

from pumplink.config.config import Config
from pumplink.config.formats import ConfigLoader


class JsonLoader(ConfigLoader):
  """Loads a `pumplink.json` holding an object with optional "logging" and "pump" objects."""

  extension = "json"

  def load(self, r: IO) -> Config:
    data = json.load(r)
    if not isinstance(data, dict):
      raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return Config.from_dict(data)
