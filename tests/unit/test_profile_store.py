"""Unit tests for profile stores."""

import sqlite3
from pathlib import Path
from unittest.mock import patch

import pytest

from finaibot.models.schemas import UserProfile
from finaibot.profiles import get_profile_store
from finaibot.profiles.store import InMemoryProfileStore, SqliteProfileStore


@pytest.fixture
def sqlite_store(tmp_path: Path) -> SqliteProfileStore:
    return SqliteProfileStore(tmp_path / "profiles.db")


class TestInMemoryProfileStore:
    async def test_returns_saved_profile(self) -> None:
        store = InMemoryProfileStore([UserProfile(user_id="u1", ai_preference="quick")])

        profile = await store.get_profile("u1")

        assert profile is not None
        assert profile.ai_preference == "quick"

    async def test_unknown_user_returns_none(self) -> None:
        assert await InMemoryProfileStore().get_profile("nobody") is None

    async def test_returned_profile_is_a_copy(self) -> None:
        store = InMemoryProfileStore(
            [UserProfile(user_id="u1", financial_data={"budgets": []})]
        )

        first = await store.get_profile("u1")
        first.financial_data["budgets"].append({"category": "Rent"})
        second = await store.get_profile("u1")

        assert second.financial_data == {"budgets": []}


class TestSqliteProfileStore:
    """Tests for the SQLite-backed store."""

    async def test_roundtrip(self, sqlite_store: SqliteProfileStore) -> None:
        saved = UserProfile(
            user_id="u1",
            ai_preference="detailed",
            financial_data={"goals": [{"name": "House", "target": 50000}]},
        )

        await sqlite_store.save_profile(saved)

        assert await sqlite_store.get_profile("u1") == saved

    async def test_unknown_user_returns_none(self, sqlite_store: SqliteProfileStore) -> None:
        assert await sqlite_store.get_profile("nobody") is None

    async def test_save_overwrites_existing(self, sqlite_store: SqliteProfileStore) -> None:
        await sqlite_store.save_profile(UserProfile(user_id="u1", ai_preference="quick"))
        await sqlite_store.save_profile(UserProfile(user_id="u1", ai_preference="balanced"))

        profile = await sqlite_store.get_profile("u1")

        assert profile.ai_preference == "balanced"
        assert profile.financial_data is None

    async def test_data_survives_new_store_instance(self, tmp_path: Path) -> None:
        db_path = tmp_path / "profiles.db"
        await SqliteProfileStore(db_path).save_profile(
            UserProfile(user_id="u1", ai_preference="quick")
        )

        profile = await SqliteProfileStore(db_path).get_profile("u1")

        assert profile.ai_preference == "quick"

    async def test_unreadable_financial_data_is_dropped(
        self, sqlite_store: SqliteProfileStore
    ) -> None:
        connection = sqlite3.connect(sqlite_store.db_path)
        with connection:
            connection.execute(
                "INSERT INTO profiles (user_id, ai_preference, financial_data) VALUES (?, ?, ?)",
                ("u1", "quick", "{not json"),
            )
        connection.close()

        profile = await sqlite_store.get_profile("u1")

        assert profile.ai_preference == "quick"
        assert profile.financial_data is None


class TestGetProfileStore:
    def test_defaults_to_in_memory(self) -> None:
        with patch.dict("os.environ", {"PROFILE_DB_PATH": ""}):
            assert isinstance(get_profile_store(), InMemoryProfileStore)

    def test_uses_sqlite_when_path_set(self, tmp_path: Path) -> None:
        with patch.dict("os.environ", {"PROFILE_DB_PATH": str(tmp_path / "p.db")}):
            assert isinstance(get_profile_store(), SqliteProfileStore)
