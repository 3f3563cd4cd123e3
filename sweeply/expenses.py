# sweeply/expenses.py
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from .deps import get_store, save_form
from .forms import ExpenseDraft, SaveOutcome
from .models import EXPENSE_CATEGORIES, CategorySum, ExpenseOut, ExpenseSummaryOut
from .store import Store
from .tables import Expense

router = APIRouter(prefix="/expenses", tags=["expenses"])

PERIODS = ["This Week", "This Month", "This Quarter", "This Year", "All Time"]


def period_start(period: str, today: Optional[date] = None) -> Optional[date]:
    """First day covered by ``period`` (weeks start on Monday); None for all time."""
    today = today or date.today()
    if period == "This Week":
        return today - timedelta(days=today.weekday())
    if period == "This Month":
        return today.replace(day=1)
    if period == "This Quarter":
        return today.replace(month=3 * ((today.month - 1) // 3) + 1, day=1)
    if period == "This Year":
        return today.replace(month=1, day=1)
    if period == "All Time":
        return None
    raise ValueError(f"unknown period: {period}")


def filter_expenses(
    expenses: Iterable[Expense],
    category: Optional[str] = None,
    search: Optional[str] = None,
    period: str = "All Time",
    today: Optional[date] = None,
) -> List[Expense]:
    start = period_start(period, today)
    result = [
        e for e in expenses
        if (category is None or e.category == category)
        and (not search or e.matches(search))
        and (start is None or e.date >= start)
    ]
    return sorted(result, key=lambda e: e.date, reverse=True)


def category_sums(expenses: Iterable[Expense]) -> List[CategorySum]:
    sums = defaultdict(float)
    for expense in expenses:
        sums[expense.category] += expense.amount
    return sorted(
        (CategorySum(category=c, sum=s) for c, s in sums.items()),
        key=lambda c: c.sum,
        reverse=True,
    )


@router.get("", response_model=ExpenseSummaryOut)
async def list_expenses(
    category: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    period: str = Query(default="This Month"),
    store: Store = Depends(get_store),
):
    if category is not None and category not in EXPENSE_CATEGORIES:
        raise HTTPException(status_code=422, detail=f"Unknown category {category}")
    if period not in PERIODS:
        raise HTTPException(status_code=422, detail=f"Unknown period {period}")
    expenses = filter_expenses(await store.expenses.list(), category, search, period)
    return ExpenseSummaryOut(
        expenses=[ExpenseOut.model_validate(e) for e in expenses],
        total=sum(e.amount for e in expenses),
        by_category=category_sums(expenses),
    )


@router.post("", response_model=SaveOutcome, status_code=201)
async def create_expense(payload: ExpenseDraft, store: Store = Depends(get_store)):
    return await save_form(payload, store.expenses)


@router.put("/{expense_id}", response_model=SaveOutcome)
async def update_expense(expense_id: int, payload: ExpenseDraft, store: Store = Depends(get_store)):
    return await save_form(payload, store.expenses, record_id=expense_id)


@router.delete("/{expense_id}")
async def delete_expense(expense_id: int, store: Store = Depends(get_store)):
    await store.expenses.delete(expense_id)
    return {"ok": True}
