"""
Version information for the did-credentials SDK.
"""
import importlib.metadata
import pathlib

import tomli

DISTRIBUTION = "did-credentials"
FALLBACK_VERSION = "1.3.3"


def _version_from_pyproject() -> str:
    """Read the version of a source checkout, falling back to FALLBACK_VERSION"""
    pyproject = pathlib.Path(__file__).resolve().parent.parent / "pyproject.toml"
    try:
        with pyproject.open("rb") as f:
            return tomli.load(f)["project"]["version"]
    except (FileNotFoundError, KeyError, tomli.TOMLDecodeError):
        return FALLBACK_VERSION


try:
    __version__ = importlib.metadata.version(DISTRIBUTION)
except importlib.metadata.PackageNotFoundError:
    __version__ = _version_from_pyproject()
