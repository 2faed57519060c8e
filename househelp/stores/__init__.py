"""Store interfaces and the bundled implementations.

Usage:
    from househelp.stores import SQLiteCandidateStore, SQLiteHistoryStore, init_db

    conn = init_db("data/househelp.db")
    engine = MatchingEngine(SQLiteCandidateStore(conn), SQLiteHistoryStore(conn))
"""

from househelp.stores.base import CandidateStore, HistoryStore
from househelp.stores.memory import InMemoryCandidateStore, InMemoryHistoryStore
from househelp.stores.sqlite import SQLiteCandidateStore, SQLiteHistoryStore, init_db

__all__ = [
    "CandidateStore",
    "HistoryStore",
    "InMemoryCandidateStore",
    "InMemoryHistoryStore",
    "SQLiteCandidateStore",
    "SQLiteHistoryStore",
    "init_db",
]
