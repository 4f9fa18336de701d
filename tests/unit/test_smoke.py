"""
Smoke tests to verify all critical dependencies are installed correctly.

These tests confirm that:
1. Python 3.11+ is installed
2. All core dependencies are importable
3. Project version is accessible
"""

import sys


class TestPythonVersion:
    """Verify Python version requirements."""

    def test_python_311_or_higher(self) -> None:
        assert sys.version_info >= (3, 11), (
            f"Python 3.11+ required, "
            f"got {sys.version_info.major}.{sys.version_info.minor}"
        )


class TestCoreDependencies:
    """Verify core dependencies."""

    def test_structlog_import(self) -> None:
        import structlog

        assert structlog.get_logger is not None

    def test_sqlalchemy_async_import(self) -> None:
        from sqlalchemy.ext.asyncio import create_async_engine

        assert create_async_engine is not None

    def test_asyncpg_import(self) -> None:
        import asyncpg

        assert asyncpg is not None


class TestProjectPackage:
    """Verify the project package itself."""

    def test_version(self, project_version: str) -> None:
        assert project_version == "0.1.0"

    def test_engine_importable(self) -> None:
        from quoroom.application.services import QuorumEngine

        assert QuorumEngine is not None
