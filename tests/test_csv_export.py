from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from agency_toolkit.adapters.storage.in_memory import InMemoryCustomerStore
from agency_toolkit.core.errors import NotFoundAppError
from agency_toolkit.schemas.agency import Agency
from agency_toolkit.services.customer_service import CustomerService
from agency_toolkit.utils.csv_export import build_csv, escape_csv


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Acme", "Acme"),
        ("", ""),
        ("a,b", '"a,b"'),
        ('say "hi"', '"say ""hi"""'),
        ("line\nbreak", '"line\nbreak"'),
    ],
)
def test_escape_csv(value: str, expected: str) -> None:
    assert escape_csv(value) == expected


def test_build_csv_has_no_trailing_newline() -> None:
    content = build_csv(("A", "B"), [("1", "2"), ("3", "x,y")])

    assert content == 'A,B\n1,2\n3,"x,y"'


def test_build_csv_headers_only() -> None:
    assert build_csv(("A", "B"), []) == "A,B"


class TestCustomerExport:
    def test_rows_and_filename(self) -> None:
        store = InMemoryCustomerStore(clock=lambda: datetime(2026, 2, 3, 15, 30, tzinfo=timezone.utc))
        agency = Agency(id="a1", name="Acme", api_key="k", token="t")
        store.insert("a1", {"name": "Bob's Bikes", "token": "bo_1", "is_active": False})
        store.insert("other", {"name": "Hidden", "token": "hi_1"})

        filename, content = CustomerService(store).export_csv(agency, today=date(2026, 5, 1))

        assert filename == "customers-2026-05-01.csv"
        assert content.split("\n") == [
            "Name,Token,GHL Location ID,GBP Place ID,Active,Created Date",
            "Bob's Bikes,bo_1,,,No,2026-02-03",
        ]

    def test_empty_export_raises(self) -> None:
        agency = Agency(id="a1", name="Acme", api_key="k", token="t")

        with pytest.raises(NotFoundAppError) as exc_info:
            CustomerService(InMemoryCustomerStore()).export_csv(agency)

        assert exc_info.value.code == "no_customers"
