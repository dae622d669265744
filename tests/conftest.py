"""Pytest configuration and shared fixtures."""

import sys
import pytest
from pathlib import Path

# Add the src directory to Python path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from keyplug_interceptors import ChainExecutor, TargetOperation  # noqa: E402
from keyplug_catalog import ProductKeyService  # noqa: E402


@pytest.fixture
def executor():
    """Shared stateless executor."""
    return ChainExecutor()


@pytest.fixture
def calls():
    """Records target invocations."""
    return []


@pytest.fixture
def echo_target(calls):
    """Target that records and tags its single argument."""
    def echo(value):
        calls.append(value)
        return f"<{value}>"

    return TargetOperation(subject="tests.echo", name="echo", func=echo)


@pytest.fixture
def add_target():
    """Two-argument target."""
    return TargetOperation(
        subject="tests.math",
        name="add",
        func=lambda a, b: a + b,
        arg_types=(int, int)
    )


@pytest.fixture
def product_service():
    """Product key service instance."""
    return ProductKeyService()


@pytest.fixture
def config_file(tmp_path):
    """Write a YAML configuration and return its path."""
    def write(content: str, name: str = "keyplug.yaml") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return write


@pytest.fixture
def broken_module(tmp_path, monkeypatch):
    """Importable module name whose source does not compile."""
    (tmp_path / "keyplug_broken_hooks.py").write_text("def hook(:\n    pass\n")
    monkeypatch.syspath_prepend(str(tmp_path))
    return "keyplug_broken_hooks"
