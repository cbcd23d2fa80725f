"""Pytest configuration and fixtures for test suite."""

import itertools
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Add src directory to path for imports
SRC_PATH = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_PATH))

from casematch.models import ClientRecord  # noqa: E402
from casematch.store import InMemoryStore  # noqa: E402

_SEQ = itertools.count(1)


@pytest.fixture
def make_client() -> Callable[..., ClientRecord]:
    """Factory for client records with minimal boilerplate.

    Ids default to ``c{n}`` and client codes to ``CL-{n:06d}`` so no random
    code can accidentally resemble a search query.
    """

    def _factory(
        first_name: str,
        last_name: str | None = None,
        *,
        id: str | None = None,
        date_of_birth: str | None = None,
        middle_name: str | None = None,
        nickname: str | None = None,
        aka: str | None = None,
        last_contact: str | None = None,
        exit_date: str | None = None,
        client_code: str | None = None,
    ) -> ClientRecord:
        n = next(_SEQ)
        return ClientRecord(
            id=id or f"c{n}",
            client_code=client_code or f"CL-{n:06d}",
            first_name=first_name,
            last_name=last_name,
            middle_name=middle_name,
            nickname=nickname,
            aka=aka,
            date_of_birth=date_of_birth,
            last_contact=last_contact,
            exit_date=exit_date,
        )

    return _factory


@pytest.fixture
def seeded_store(make_client: Callable[..., ClientRecord]) -> InMemoryStore:
    """In-memory registry with two duplicate pairs and one distinct client.

    - a (John Smith): 2 encounters, b (Jon Smith): 3 encounters
    - r (Robert Jones, 1980-03-14): 2 encounters, s (Rob Jones, 1980-03-14): none
    - m (Maria Garcia): 1 encounter
    """
    store = InMemoryStore(
        [
            make_client("John", "Smith", id="a"),
            make_client("Jon", "Smith", id="b"),
            make_client("Robert", "Jones", id="r", date_of_birth="1980-03-14"),
            make_client("Rob", "Jones", id="s", date_of_birth="1980-03-14"),
            make_client("Maria", "Garcia", id="m"),
        ]
    )
    for client_id, dates in {
        "a": ["2024-01-02", "2024-02-03"],
        "b": ["2024-01-10", "2024-03-01", "2024-04-15"],
        "r": ["2024-01-05", "2024-03-10"],
        "m": ["2024-05-20"],
    }.items():
        for service_date in dates:
            store.add_encounter(client_id, service_date, "Main St")
    return store
