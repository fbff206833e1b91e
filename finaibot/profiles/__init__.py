"""Profile stores holding per-user style preferences and financial data."""

import os

from finaibot.profiles.store import InMemoryProfileStore, ProfileStore, SqliteProfileStore


def get_profile_store() -> ProfileStore:
    """Create the profile store named by PROFILE_DB_PATH.

    Returns:
        SqliteProfileStore when PROFILE_DB_PATH is set, otherwise an empty
        InMemoryProfileStore.
    """
    db_path = os.getenv("PROFILE_DB_PATH")
    if db_path:
        return SqliteProfileStore(db_path)
    return InMemoryProfileStore()


__all__ = ["InMemoryProfileStore", "ProfileStore", "SqliteProfileStore", "get_profile_store"]
