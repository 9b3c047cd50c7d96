"""Shared pytest fixtures for c2hsc tests."""

import shutil

import pytest

from c2hsc.backends import get_backend
from c2hsc.hsc_output import HscOutput, TypeMap


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "cpp: needs gcc on PATH to preprocess headers")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip preprocessor tests when no gcc is installed."""
    if shutil.which("gcc") is not None:
        return
    skip_cpp = pytest.mark.skip(reason="gcc not found on PATH")
    for item in items:
        if "cpp" in item.keywords:
            item.add_marker(skip_cpp)


@pytest.fixture
def types() -> TypeMap:
    return TypeMap()


@pytest.fixture
def output() -> HscOutput:
    return HscOutput()


@pytest.fixture
def backend():
    """The default (pycparser) backend."""
    return get_backend()


@pytest.fixture
def gcc_path() -> str:
    path = shutil.which("gcc")
    assert path is not None
    return path
