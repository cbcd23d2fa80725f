"""Registry store boundary and bundled implementations.

- RegistryStore: protocol the reconciler and scanners depend on
- InMemoryStore: dict-backed store for tests and snapshots
- SQLiteStore: transactional store on a SQLite file
"""

from casematch.store.base import RegistryStore
from casematch.store.loader import load_jsonl, read_jsonl, write_jsonl
from casematch.store.memory import InMemoryStore
from casematch.store.sqlite import SCHEMA_SQL, SQLiteStore

__all__ = [
    "RegistryStore",
    "InMemoryStore",
    "SQLiteStore",
    "SCHEMA_SQL",
    "load_jsonl",
    "read_jsonl",
    "write_jsonl",
]
