from typing import Any

import pytest

from skyledger.config import Settings
from skyledger.services.retry import RetryPolicy


def make_slot(display_name: str | None, count: int | None = None, item_id: int = 1) -> dict:
    slot: dict[str, Any] = {"id": item_id}
    if display_name is not None:
        slot["display_name"] = display_name
    if count is not None:
        slot["Count"] = count
    return slot


def make_profile(
    inventory: list | dict | None = None,
    enderchest: list | dict | None = None,
    storage: list | dict | None = None,
) -> dict:
    """Build a raw profile document with one current and one stale profile."""
    return {
        "profiles": {
            "old-profile": {
                "current": False,
                "data": {"items": {"inventory": [make_slot("Stale Item", 99)]}},
            },
            "active-profile": {
                "current": True,
                "data": {
                    "items": {
                        "inventory": inventory if inventory is not None else [],
                        "enderchest": enderchest if enderchest is not None else [],
                        "storage": storage if storage is not None else [],
                    }
                },
            },
        }
    }


@pytest.fixture
def fast_retry() -> RetryPolicy:
    """Three attempts without sleeping between them."""
    return RetryPolicy(attempts=3, initial_delay=0.0)


@pytest.fixture
def sample_profile() -> dict:
    """Profile holding diamonds across containers and a sword in storage."""
    return make_profile(
        inventory=[
            make_slot("Diamond", 3),
            make_slot("Diamond", 5),
            {},
            make_slot("Bread"),
        ],
        enderchest={"0": make_slot("Enchanted Gold", 10), "1": None},
        storage=[
            {"containsItems": [make_slot("Aspect of the End", 1)]},
            {"containsItems": None},
            {"containsItems": {"3": make_slot("Aspect of the End", 1)}},
        ],
    )


@pytest.fixture
def settings(tmp_path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Tracker settings backed by a temp-file SQLite document store."""
    monkeypatch.chdir(tmp_path)
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'tracker.db'}",
        player_name="Steve",
        bot_token="123:secret",
        chat_id="42",
        profile_api_url="https://profiles.test/api/v2/profile",
        telegram_api_url="https://telegram.test",
        retry_attempts=2,
        retry_initial_delay=0.0,
    )
