"""Tests for pyproject.toml and package installation."""
from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

PYPROJECT = Path(__file__).parent.parent / "pyproject.toml"


class TestPackageInstallation:
    """Test that the package is properly installed."""

    def test_version_defined(self):
        """Package has __version__ attribute."""
        import tts_gateway
        assert isinstance(tts_gateway.__version__, str)
        assert len(tts_gateway.__version__) > 0

    def test_core_modules_importable(self):
        """Core modules can be imported."""
        from tts_gateway.core import config
        from tts_gateway.core import logging
        from tts_gateway.api import routes
        from tts_gateway.api import schemas
        from tts_gateway.providers import base
        from tts_gateway.services import gateway

        assert config is not None
        assert logging is not None
        assert routes is not None
        assert schemas is not None
        assert base is not None
        assert gateway is not None

    def test_adapters_loaded_lazily(self):
        """Adapter classes resolve through the providers package."""
        import tts_gateway.providers as providers

        assert providers.StandardProvider.name == "standard"
        assert providers.ManagedIdentityProvider.name == "managed-identity"
        assert providers.CommercialProvider.name == "commercial"
        with pytest.raises(AttributeError):
            providers.AzureProvider


class TestCLIEntryPoint:
    """Test the CLI entry point."""

    def test_cli_help_exits_zero(self):
        env = {k: v for k, v in os.environ.items() if k != "PYTHONPATH"}
        env["PYTHONPATH"] = "src"
        result = subprocess.run(
            [sys.executable, "-m", "tts_gateway.cli", "--help"],
            capture_output=True,
            text=True,
            cwd=Path(__file__).parent.parent,
            env=env,
        )
        assert result.returncode == 0
        assert "tts-gateway CLI" in result.stdout


class TestPyprojectToml:
    """Test pyproject.toml configuration."""

    def _load(self):
        tomllib = pytest.importorskip("tomllib")
        return tomllib.loads(PYPROJECT.read_text(encoding="utf-8"))

    def test_project_name(self):
        data = self._load()
        assert data["project"]["name"] == "tts-gateway"

    def test_version_matches_package(self):
        import tts_gateway
        assert self._load()["project"]["version"] == tts_gateway.__version__

    def test_pyproject_has_dependencies(self):
        deps = self._load()["project"]["dependencies"]
        dep_names = [d.split(">=")[0].split("[")[0] for d in deps]
        for name in ("fastapi", "uvicorn", "pydantic", "pyyaml", "httpx", "google-auth"):
            assert name in dep_names

    def test_entry_point(self):
        scripts = self._load()["project"]["scripts"]
        assert scripts["tts-gateway"] == "tts_gateway.cli:main"
