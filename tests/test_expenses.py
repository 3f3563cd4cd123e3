# tests/test_expenses.py
from datetime import date

import pytest

from sweeply.expenses import category_sums, filter_expenses, period_start
from sweeply.tables import Expense

TODAY = date(2024, 5, 15)  # a Wednesday


@pytest.mark.parametrize(
    "period, start",
    [
        ("This Week", date(2024, 5, 13)),
        ("This Month", date(2024, 5, 1)),
        ("This Quarter", date(2024, 4, 1)),
        ("This Year", date(2024, 1, 1)),
        ("All Time", None),
    ],
)
def test_period_start(period, start):
    assert period_start(period, TODAY) == start


def test_unknown_period():
    with pytest.raises(ValueError):
        period_start("Fortnight", TODAY)


def _expenses():
    return [
        Expense(name="Mop heads", amount=20.0, category="Supplies", date=date(2024, 5, 14)),
        Expense(name="Fuel", amount=45.0, category="Travel", date=date(2024, 5, 2)),
        Expense(name="Sponges", amount=5.0, category="Supplies", date=date(2024, 5, 10)),
        Expense(name="Van lease", amount=300.0, category="Rent", date=date(2024, 3, 1)),
    ]


def test_filter_by_period_and_category():
    month = filter_expenses(_expenses(), period="This Month", today=TODAY)
    assert [e.name for e in month] == ["Mop heads", "Sponges", "Fuel"]

    supplies = filter_expenses(_expenses(), category="Supplies", period="All Time", today=TODAY)
    assert [e.name for e in supplies] == ["Mop heads", "Sponges"]

    searched = filter_expenses(_expenses(), search="van", period="All Time", today=TODAY)
    assert [e.name for e in searched] == ["Van lease"]


def test_category_sums_sorted_descending():
    sums = category_sums(_expenses())
    assert [(s.category, s.sum) for s in sums] == [("Rent", 300.0), ("Travel", 45.0), ("Supplies", 25.0)]
    assert category_sums([]) == []
