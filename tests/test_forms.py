# tests/test_forms.py
import asyncio
from datetime import date, datetime, time

from sweeply.forms import (
    ClientDraft,
    ExpenseDraft,
    FormSession,
    JobDraft,
    LineItemDraft,
    TaskDraft,
)
from sweeply.store import StoreError
from sweeply.tables import Client, Expense, Job, JobLineItem, Task


def test_all_day_task_is_normalised_to_start_of_day():
    draft = TaskDraft(title="Quote", due_date=date(2024, 5, 10), due_time=time(14, 30), is_all_day=True)
    assert draft.effective_due_date == datetime(2024, 5, 10, 0, 0)


def test_timed_task_combines_date_and_time():
    draft = TaskDraft(title="Quote", due_date=date(2024, 5, 10), due_time=time(14, 30))
    assert draft.effective_due_date == datetime(2024, 5, 10, 14, 30)
    assert TaskDraft(title="Quote").effective_due_date is None


def test_has_content_and_is_valid():
    empty = TaskDraft()
    assert not empty.has_content
    assert not empty.is_valid

    described = TaskDraft(description="call back")
    assert described.has_content
    assert not described.is_valid

    assert TaskDraft(title="  ").has_content
    assert not TaskDraft(title="  ").is_valid
    assert TaskDraft(title="Call").is_valid


def test_client_draft_needs_a_name():
    assert not ClientDraft(email="a@b.c").is_valid
    assert ClientDraft(company_name="Acme").is_valid
    assert ClientDraft(last_name="Lee").is_valid


def test_job_draft_rules():
    assert not JobDraft(job_title="Windows").is_valid
    assert not JobDraft(first_name="Ann").is_valid
    assert JobDraft(client_id=3, job_title="Windows").is_valid
    assert JobDraft(first_name="Ann", job_title="Windows").is_valid

    draft = JobDraft(
        client_id=3,
        job_title="Windows",
        line_items=[LineItemDraft(name="a", quantity=2, price=5.0), LineItemDraft(name="b", quantity=1, price=2.5)],
        schedule_later=True,
        scheduled_date=datetime(2024, 5, 1, 9, 0),
    )
    assert draft.subtotal == 12.5
    assert draft.to_values()["scheduled_date"] is None
    assert draft.to_record().client is None


def test_expense_draft_rules():
    assert not ExpenseDraft(name="Mop", amount=0).is_valid
    assert not ExpenseDraft(name="Mop", amount=5, category="Snacks").is_valid
    assert ExpenseDraft(name="Mop", amount=5, category="Supplies").is_valid
    assert ExpenseDraft(name="Mop", amount=5).to_values()["date"] == date.today()


def test_task_draft_round_trips_a_record():
    task = Task(
        title="Quote",
        task_description="",
        status="In Progress",
        priority="High",
        due_date=datetime(2024, 5, 10, 14, 30),
        is_all_day_task=False,
        assignee="",
    )
    draft = TaskDraft.from_record(task)
    assert draft.due_date == date(2024, 5, 10)
    assert draft.due_time == time(14, 30)
    assert draft.assignee == "Unassigned"
    assert draft.to_values()["due_date"] == task.due_date


async def test_successful_save_resolves_dismissal(store):
    session = FormSession(TaskDraft(title="Call Ann"), store.tasks)
    assert session.can_save
    assert not session.dismissed.done()

    outcome = await session.save()

    assert outcome.saved
    assert await asyncio.wait_for(session.wait_dismissed(), timeout=1) == outcome
    task = await store.tasks.require(outcome.id)
    assert task.title == "Call Ann"


async def test_edit_updates_existing_record(store):
    created = await FormSession(TaskDraft(title="Call Ann"), store.tasks).save()
    edit = FormSession(TaskDraft(title="Call Ann back"), store.tasks, record_id=created.id)

    outcome = await edit.save()

    assert outcome.id == created.id
    assert (await store.tasks.require(created.id)).title == "Call Ann back"
    assert len(await store.tasks.list()) == 1


async def test_invalid_draft_is_not_saved(store):
    session = FormSession(TaskDraft(description="no title"), store.tasks)
    outcome = await session.save()
    assert not outcome.saved
    assert not session.dismissed.done()
    assert await store.tasks.list() == []


class _BrokenRepository:
    entity = "task"

    async def create(self, record):
        raise StoreError("disk full")


async def test_store_failure_keeps_form_open():
    draft = TaskDraft(title="Call Ann")
    session = FormSession(draft, _BrokenRepository())

    outcome = await session.save()

    assert not outcome.saved
    assert outcome.error == "disk full"
    assert not session.dismissed.done()
    assert session.draft.title == "Call Ann"


async def test_client_draft_seeded_from_record_edits_in_place(store):
    client = await store.clients.create(
        Client(first_name="Ann", last_name="Smith", company_name="Sparkle Co", property_address="1 Main St")
    )
    draft = ClientDraft.from_record(client)
    assert draft.first_name == "Ann"
    assert draft.property_address == "1 Main St"
    assert draft.billing_address == "1 Main St"
    assert draft.is_valid

    draft.email = "ann@example.com"
    outcome = await FormSession(draft, store.clients, record_id=client.id).save()

    assert outcome.id == client.id
    saved = await store.clients.require(client.id)
    assert saved.email == "ann@example.com"
    assert saved.company_name == "Sparkle Co"


async def test_job_draft_seeded_from_record_keeps_line_items(store):
    job = Job(first_name="Ann", job_title="Windows")
    job.line_items = [JobLineItem(name="Panes", quantity=4, price=12.5)]
    job = await store.jobs.create(job)

    draft = JobDraft.from_record(job)
    assert draft.job_title == "Windows"
    assert [(i.name, i.quantity, i.price) for i in draft.line_items] == [("Panes", 4, 12.5)]
    assert draft.subtotal == 50.0

    draft.job_title = "Windows and screens"
    await FormSession(draft, store.jobs, record_id=job.id).save()

    saved = await store.jobs.require(job.id)
    assert saved.job_title == "Windows and screens"
    assert saved.subtotal == 50.0
    assert len(saved.line_items) == 1


async def test_expense_draft_seeded_from_record(store):
    expense = await store.expenses.create(
        Expense(name="Mops", amount=20.0, category="Supplies", date=date(2024, 5, 2))
    )
    draft = ExpenseDraft.from_record(expense)
    assert draft.date == date(2024, 5, 2)
    assert draft.is_valid

    draft.amount = 25.0
    await FormSession(draft, store.expenses, record_id=expense.id).save()

    saved = await store.expenses.require(expense.id)
    assert saved.amount == 25.0
    assert saved.date == date(2024, 5, 2)
