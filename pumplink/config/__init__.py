"""

Config module. Reads the module-level config file: the current directory and all
parent directories are searched for a `pumplink.ini` (or `pumplink.json`). If no
config file exists, the default Config is used.
"""
from pathlib import Path
from typing import Optional, Union

from pumplink.config.config import Config
from pumplink.config.formats import MultiLoader
from pumplink.config.formats.ini_config import IniLoader
from pumplink.config.formats.json_config import JsonLoader

DEFAULT_LOADER = MultiLoader([IniLoader(), JsonLoader()])


def get_file(base_name: str, _dir: Path) -> Optional[Path]:
  for ext in DEFAULT_LOADER.extensions:
    cfg = _dir / f"{base_name}.{ext}"
    if cfg.exists():
      return cfg
  return None


def get_config_file(
  base_name: str,
  cur_dir: Optional[Union[str, Path]] = None
) -> Optional[Path]:
  """Get the path to the config file.

  Args:
    base_name: The base name of the config file.
    cur_dir: The directory to start searching from. Defaults to the current working directory.

  Returns:
    The path to the config file, or None if neither this directory nor any parent has one.
  """
  cdir = Path(cur_dir) if cur_dir is not None else Path.cwd()

  cfg = get_file(base_name, cdir)
  if cfg is not None:
    return cfg

  if cdir.parent == cdir:
    return None

  return get_config_file(base_name, cdir.parent)


def read_config(path: Union[str, Path]) -> Config:
  """Read a Config from an INI or JSON file."""
  with open(path, "r", encoding="utf-8") as f:
    return DEFAULT_LOADER.load(f)


def load_config(base_file_name: str, cur_dir: Optional[Union[str, Path]] = None) -> Config:
  """Load the Config from the nearest `<base_file_name>.ini` or `.json`.

  Args:
    base_file_name: The base file name to load.
    cur_dir: The directory to start searching from. Defaults to the current working directory.

  Returns:
    The loaded Config, or the default Config if no file was found.
  """
  config_path = get_config_file(base_file_name, cur_dir)
  if config_path is None:
    return Config()
  return read_config(config_path)
