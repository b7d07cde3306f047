"""
Tests for version discovery.
"""
import importlib
import re
from importlib import metadata as importlib_metadata
from unittest.mock import mock_open

import pytest

import did_credentials
import did_credentials.version as vmod


def _not_installed(name):
    raise importlib_metadata.PackageNotFoundError(name)


@pytest.fixture(autouse=True)
def reload_version():
    yield
    importlib.reload(vmod)


def test_version_format():
    assert re.match(r"^\d+\.\d+\.\d+", did_credentials.__version__)


def test_version_from_metadata(monkeypatch):
    """Installed distributions report their metadata version"""
    monkeypatch.setattr(importlib_metadata, "version", lambda name: "2.3.4")
    importlib.reload(vmod)
    assert vmod.__version__ == "2.3.4"


def test_version_from_pyproject(monkeypatch):
    monkeypatch.setattr(importlib_metadata, "version", _not_installed)
    monkeypatch.setattr("pathlib.Path.open", mock_open(read_data=b'[project]\nversion = "9.8.7"\n'))
    importlib.reload(vmod)
    assert vmod.__version__ == "9.8.7"


@pytest.mark.parametrize("content", [
    b'[project]\nname = "did-credentials"\n',
    b"this is = = not toml",
])
def test_unusable_pyproject_falls_back(monkeypatch, content):
    monkeypatch.setattr(importlib_metadata, "version", _not_installed)
    monkeypatch.setattr("pathlib.Path.open", mock_open(read_data=content))
    importlib.reload(vmod)
    assert vmod.__version__ == vmod.FALLBACK_VERSION


def test_missing_pyproject_falls_back(monkeypatch):
    def missing(*args, **kwargs):
        raise FileNotFoundError()

    monkeypatch.setattr(importlib_metadata, "version", _not_installed)
    monkeypatch.setattr("pathlib.Path.open", missing)
    importlib.reload(vmod)
    assert vmod.__version__ == vmod.FALLBACK_VERSION
