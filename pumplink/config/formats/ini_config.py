import configparser
from typing import IO

from pumplink.config.config import Config
from pumplink.config.formats import ConfigLoader


class IniLoader(ConfigLoader):
  """Loads a `pumplink.ini` with optional `[logging]` and `[pump]` sections."""

  extension = "ini"

  def load(self, r: IO) -> Config:
    config = configparser.ConfigParser()
    config.read_file(r)
    if not config.sections():
      raise ValueError("INI stream has no sections.")
    return Config.from_dict({section: dict(config[section]) for section in config.sections()})
