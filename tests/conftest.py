"""Shared pytest fixtures for propdesk tests."""

import json

import pytest

from propdesk.models.query import SortDirective
from propdesk.models.schema import EntityDefinition, SearchColumn


@pytest.fixture
def columns():
    """Column schema of the properties screen plus a date column."""
    return [
        SearchColumn(key="pf_id", label="PF ID", type="text"),
        SearchColumn(key="status", label="Status", type="text"),
        SearchColumn(key="bedrooms", label="Bedrooms", type="number"),
        SearchColumn(key="price", label="Price", type="number"),
        SearchColumn(key="square_meter", label="Square Meter", type="number"),
        SearchColumn(key="listed_on", label="Listed On", type="date"),
    ]


@pytest.fixture
def entity(columns):
    """Entity wrapping the test schema."""
    return EntityDefinition(
        name="properties",
        label="Properties",
        columns=columns,
        default_sort=SortDirective(column="id", direction="asc"),
    )


@pytest.fixture
def rows():
    """Property rows for backend and CLI tests."""
    return [
        {"id": 1, "pf_id": "PF-100", "status": "active", "bedrooms": 2, "price": 450000,
         "square_meter": 80, "listed_on": "2024-01-05"},
        {"id": 2, "pf_id": "PF-101", "status": "active", "bedrooms": 4, "price": 1200000,
         "square_meter": 210, "listed_on": "2024-02-11"},
        {"id": 3, "pf_id": "PF-102", "status": "sold", "bedrooms": 3, "price": 800000,
         "square_meter": 150, "listed_on": "2024-03-20"},
        {"id": 4, "pf_id": "PF-103", "status": "inactive", "bedrooms": 1, "price": 300000,
         "square_meter": 45, "listed_on": "2023-12-01"},
        {"id": 5, "pf_id": "PF-104", "status": "active", "bedrooms": 5, "price": None,
         "square_meter": 400, "listed_on": "2024-04-02"},
    ]


@pytest.fixture
def records_file(tmp_path, rows):
    """Rows written as a JSON array file."""
    f = tmp_path / "properties.json"
    f.write_text(json.dumps(rows))
    return f


class FakeTimer:
    """Timer handle recorded by FakeScheduler."""

    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.stopped = False

    def stop(self):
        self.stopped = True


class FakeScheduler:
    """Deterministic stand-in for App.set_timer.

    Timers never fire on their own; tests call fire() to run the latest
    live timer.
    """

    def __init__(self):
        self.timers: list[FakeTimer] = []

    def __call__(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.stopped]

    def fire(self) -> None:
        live = self.live
        assert live, "no live timer to fire"
        timer = live[-1]
        timer.stopped = True
        timer.callback()


@pytest.fixture
def scheduler():
    return FakeScheduler()


# Pytest markers
def pytest_configure(config):
    config.addinivalue_line("markers", "integration: mark test as integration test")
