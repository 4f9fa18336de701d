"""Unit tests for database bootstrap helpers."""

from __future__ import annotations

import pytest

from quoroom.bootstrap.database import (
    get_database_url,
    mask_password,
    reset_database_bootstrap,
    to_async_url,
)


class TestToAsyncUrl:
    """Tests for to_async_url()."""

    @pytest.mark.parametrize(
        "url",
        [
            "postgres://u:p@db:5432/quoroom",
            "postgresql://u:p@db:5432/quoroom",
            "postgresql+psycopg2://u:p@db:5432/quoroom",
            "postgresql+asyncpg://u:p@db:5432/quoroom",
        ],
    )
    def test_converts_to_asyncpg(self, url: str) -> None:
        assert to_async_url(url) == "postgresql+asyncpg://u:p@db:5432/quoroom"


class TestMaskPassword:
    """Tests for mask_password()."""

    def test_masks_password(self) -> None:
        masked = mask_password("postgresql+asyncpg://quoroom:hunter2@db:5432/q")
        assert masked == "postgresql+asyncpg://quoroom:***@db:5432/q"

    def test_without_password_unchanged(self) -> None:
        assert mask_password("postgresql://db/q") == "postgresql://db/q"
        assert mask_password("postgresql://quoroom@db/q") == "postgresql://quoroom@db/q"


class TestGetDatabaseUrl:
    """Tests for get_database_url()."""

    def test_missing_url_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATABASE_URL", raising=False)
        reset_database_bootstrap()
        with pytest.raises(ValueError) as exc_info:
            get_database_url()
        assert "DATABASE_URL" in str(exc_info.value)

    def test_reads_and_converts(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgres://u:p@db/q")
        assert get_database_url() == "postgresql+asyncpg://u:p@db/q"
