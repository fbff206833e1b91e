"""User profile stores read by the relay.

The relay needs two things from a profile: the stored response style and,
for personalised answers, a snapshot of the user's financial data.
"""

import asyncio
import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path

from finaibot.models.schemas import UserProfile

logger = logging.getLogger(__name__)


class ProfileStore(ABC):
    @abstractmethod
    async def get_profile(self, user_id: str) -> UserProfile | None:
        pass

    @abstractmethod
    async def save_profile(self, profile: UserProfile) -> None:
        pass


class InMemoryProfileStore(ProfileStore):
    """Dict-backed store for development and tests."""

    def __init__(self, profiles: list[UserProfile] | None = None) -> None:
        self._profiles: dict[str, UserProfile] = {}
        for profile in profiles or []:
            self._profiles[profile.user_id] = profile

    async def get_profile(self, user_id: str) -> UserProfile | None:
        profile = self._profiles.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    async def save_profile(self, profile: UserProfile) -> None:
        self._profiles[profile.user_id] = profile.model_copy(deep=True)


class SqliteProfileStore(ProfileStore):
    """SQLite-backed profile store.

    Each call opens its own connection inside a worker thread so concurrent
    requests never share a cursor.
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = str(db_path)
        self._init_table()

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self.db_path)
        connection.row_factory = sqlite3.Row
        return connection

    def _init_table(self) -> None:
        query = """
        CREATE TABLE IF NOT EXISTS profiles (
            user_id TEXT PRIMARY KEY,
            ai_preference TEXT,
            financial_data TEXT
        );
        """
        connection = self._connect()
        try:
            with connection:
                connection.execute(query)
        finally:
            connection.close()
        logger.info(f"Profile store ready at {self.db_path}")

    def _get_profile_sync(self, user_id: str) -> UserProfile | None:
        query = "SELECT user_id, ai_preference, financial_data FROM profiles WHERE user_id = ?"
        connection = self._connect()
        try:
            row = connection.execute(query, (user_id,)).fetchone()
        finally:
            connection.close()

        if row is None:
            return None

        financial_data = None
        if row["financial_data"]:
            try:
                financial_data = json.loads(row["financial_data"])
            except json.JSONDecodeError:
                logger.warning(f"Ignoring unreadable financial data for user {user_id}")

        return UserProfile(
            user_id=row["user_id"],
            ai_preference=row["ai_preference"],
            financial_data=financial_data,
        )

    def _save_profile_sync(self, profile: UserProfile) -> None:
        query = """
        INSERT INTO profiles (user_id, ai_preference, financial_data)
        VALUES (?, ?, ?)
        ON CONFLICT(user_id) DO UPDATE SET
            ai_preference = excluded.ai_preference,
            financial_data = excluded.financial_data;
        """
        financial_data = (
            json.dumps(profile.financial_data) if profile.financial_data is not None else None
        )
        connection = self._connect()
        try:
            with connection:
                connection.execute(
                    query, (profile.user_id, profile.ai_preference, financial_data)
                )
        finally:
            connection.close()

    async def get_profile(self, user_id: str) -> UserProfile | None:
        return await asyncio.to_thread(self._get_profile_sync, user_id)

    async def save_profile(self, profile: UserProfile) -> None:
        await asyncio.to_thread(self._save_profile_sync, profile)
