# sweeply/forms.py
"""Draft state for the create/edit screens and the save flow they share.

A draft is seeded from a record (edit) or from defaults (create). ``has_content``
decides whether the Save affordance shows at all, ``is_valid`` whether it is
enabled. ``FormSession.save`` performs exactly one store write and resolves the
session's ``dismissed`` future when it succeeds; a failed write is logged and
leaves the form open with the draft intact.
"""
import asyncio
import datetime as dt
import logging
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .models import EXPENSE_CATEGORIES, TaskPriority, TaskStatus
from .store import Repository, StoreError
from .tables import Client, Expense, Job, JobLineItem, Task, start_of_day

log = logging.getLogger(__name__)

UNASSIGNED = "Unassigned"
DEFAULT_DUE_TIME = time(9, 0)


class Draft(BaseModel):
    @property
    def has_content(self) -> bool:
        return self.model_dump() != type(self)().model_dump()

    @property
    def is_valid(self) -> bool:
        raise NotImplementedError

    def to_record(self):
        raise NotImplementedError

    def to_values(self) -> Dict[str, Any]:
        raise NotImplementedError


# ──────────────────────────────────────────────────────────────────────────────
# Task
# ──────────────────────────────────────────────────────────────────────────────
class TaskDraft(Draft):
    title: str = ""
    description: str = ""
    status: TaskStatus = TaskStatus.OPEN
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None
    due_time: time = DEFAULT_DUE_TIME
    is_all_day: bool = False
    assignee: str = UNASSIGNED

    @classmethod
    def from_record(cls, task: Task) -> "TaskDraft":
        due = task.due_date
        return cls(
            title=task.title,
            description=task.task_description,
            status=task.status,
            priority=task.priority,
            due_date=due.date() if due else None,
            due_time=due.time() if due and not task.is_all_day_task else DEFAULT_DUE_TIME,
            is_all_day=task.is_all_day_task,
            assignee=task.assignee or UNASSIGNED,
        )

    @property
    def is_valid(self) -> bool:
        return bool(self.title.strip())

    @property
    def effective_due_date(self) -> Optional[datetime]:
        if self.due_date is None:
            return None
        if self.is_all_day:
            return start_of_day(self.due_date)
        return datetime.combine(self.due_date, self.due_time)

    def to_values(self) -> Dict[str, Any]:
        return {
            "title": self.title.strip(),
            "task_description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "due_date": self.effective_due_date,
            "is_all_day_task": self.is_all_day,
            "assignee": self.assignee,
        }

    def to_record(self) -> Task:
        return Task(**self.to_values())


# ──────────────────────────────────────────────────────────────────────────────
# Client
# ──────────────────────────────────────────────────────────────────────────────
class ClientDraft(Draft):
    first_name: str = ""
    last_name: str = ""
    company_name: str = ""
    phone_number: str = ""
    phone_label: str = "Main"
    receives_text_messages: bool = False
    email: str = ""
    lead_source: str = ""
    property_address: str = ""
    property_address_line2: str = ""
    property_city: str = ""
    property_state: str = ""
    property_zip_code: str = ""
    property_country: str = "United States"
    billing_same_as_property: bool = True
    billing_address: str = ""
    billing_address_line2: str = ""
    billing_city: str = ""
    billing_state: str = ""
    billing_zip_code: str = ""
    billing_country: str = "United States"

    @classmethod
    def from_record(cls, client: Client) -> "ClientDraft":
        return cls(**{name: getattr(client, name) for name in cls.model_fields})

    @property
    def is_valid(self) -> bool:
        return bool(self.first_name or self.last_name or self.company_name)

    def to_values(self) -> Dict[str, Any]:
        return self.model_dump()

    def to_record(self) -> Client:
        return Client(**self.to_values())


# ──────────────────────────────────────────────────────────────────────────────
# Job
# ──────────────────────────────────────────────────────────────────────────────
class LineItemDraft(BaseModel):
    name: str = ""
    quantity: int = Field(default=1, ge=0)
    price: float = Field(default=0.0, ge=0)


class JobDraft(Draft):
    client_id: Optional[int] = None
    first_name: str = ""
    last_name: str = ""
    property_address: str = ""
    billing_address: Optional[str] = None
    job_title: str = ""
    instructions: str = ""
    phone_number: str = ""
    email: str = ""
    salesperson: str = ""
    line_items: List[LineItemDraft] = []
    schedule_later: bool = False
    scheduled_date: Optional[datetime] = None
    team_member: str = ""
    remind_to_invoice: bool = False

    @classmethod
    def from_record(cls, job: Job) -> "JobDraft":
        values = {name: getattr(job, name) for name in cls.model_fields if name != "line_items"}
        items = [LineItemDraft(name=i.name, quantity=i.quantity, price=i.price) for i in job.line_items]
        return cls(**values, line_items=items)

    @property
    def subtotal(self) -> float:
        return sum(item.price * item.quantity for item in self.line_items)

    @property
    def is_valid(self) -> bool:
        has_client = self.client_id is not None or bool(self.first_name or self.last_name)
        return has_client and bool(self.job_title.strip())

    def to_values(self) -> Dict[str, Any]:
        # line items are fixed once the job exists; edits touch the job fields only
        values = self.model_dump(exclude={"line_items"})
        if self.schedule_later:
            values["scheduled_date"] = None
        return values

    def to_record(self) -> Job:
        job = Job(**self.to_values())
        job.line_items = [JobLineItem(**item.model_dump()) for item in self.line_items]
        if self.client_id is None and (self.first_name or self.last_name):
            # no client picked: the names typed into the job form become a new client
            job.client = Client(
                first_name=self.first_name,
                last_name=self.last_name,
                phone_number=self.phone_number,
                email=self.email,
                property_address=self.property_address,
            )
        return job


# ──────────────────────────────────────────────────────────────────────────────
# Expense
# ──────────────────────────────────────────────────────────────────────────────
class ExpenseDraft(Draft):
    name: str = ""
    amount: float = 0.0
    category: str = "Other"
    date: Optional[dt.date] = None
    notes: Optional[str] = None

    @classmethod
    def from_record(cls, expense: Expense) -> "ExpenseDraft":
        return cls(
            name=expense.name,
            amount=expense.amount,
            category=expense.category,
            date=expense.date,
            notes=expense.notes,
        )

    @property
    def is_valid(self) -> bool:
        return bool(self.name.strip()) and self.amount > 0 and self.category in EXPENSE_CATEGORIES

    def to_values(self) -> Dict[str, Any]:
        values = self.model_dump()
        values["name"] = self.name.strip()
        values["date"] = self.date or date.today()
        return values

    def to_record(self) -> Expense:
        return Expense(**self.to_values())


# ──────────────────────────────────────────────────────────────────────────────
# Save flow
# ──────────────────────────────────────────────────────────────────────────────
class SaveOutcome(BaseModel):
    saved: bool
    id: Optional[int] = None
    error: Optional[str] = None


class FormSession:
    """One open create/edit screen."""

    def __init__(self, draft: Draft, repository: Repository, record_id: Optional[int] = None):
        self.draft = draft
        self.repository = repository
        self.record_id = record_id
        self.dismissed: asyncio.Future = asyncio.get_running_loop().create_future()

    @property
    def is_editing(self) -> bool:
        return self.record_id is not None

    @property
    def can_save(self) -> bool:
        return self.draft.has_content and self.draft.is_valid

    async def save(self) -> SaveOutcome:
        if not self.draft.is_valid:
            return SaveOutcome(saved=False)
        try:
            if self.is_editing:
                record = await self.repository.update(self.record_id, **self.draft.to_values())
            else:
                record = await self.repository.create(self.draft.to_record())
        except StoreError as e:
            log.error("saving %s failed: %s", self.repository.entity, e)
            return SaveOutcome(saved=False, error=str(e))

        self.record_id = record.id
        outcome = SaveOutcome(saved=True, id=record.id)
        if not self.dismissed.done():
            self.dismissed.set_result(outcome)
        return outcome

    async def wait_dismissed(self) -> SaveOutcome:
        return await self.dismissed
