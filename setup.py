from setuptools import setup, find_packages

with open("pumplink/version.txt", "r", encoding="utf-8") as f:
  __version__ = f.read().strip()

with open("README.md", "r", encoding="utf-8") as f:
  long_description = f.read()


extras_dev = [
  "pytest",
  "pytest-timeout",
  "pylint",
  "mypy",
]

extras_all = extras_dev

setup(
  name="pumplink",
  version=__version__,
  packages=find_packages(include=["pumplink", "pumplink.*"]),
  description="Control of New Era syringe pumps over RS-232",
  long_description=long_description,
  long_description_content_type="text/markdown",
  python_requires=">=3.10",
  install_requires=["pyserial"],
  package_data={"pumplink": ["version.txt"]},
  extras_require={
    "dev": extras_dev,
    "all": extras_all,
  },
)
