# sweeply/tables.py
"""SQLAlchemy tables for the on-device store.

Relationships that views walk (client -> jobs -> line items) load eagerly with
``selectin`` so records stay usable after their session closes.
"""
from datetime import date, datetime, time, timedelta

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

UNNAMED_CLIENT = "Unnamed Client"
DEFAULT_COUNTRY = "United States"

_BILLING_FIELDS = ("address", "address_line2", "city", "state", "zip_code", "country")


def _contains(term: str, *values) -> bool:
    needle = term.casefold()
    return any(needle in (v or "").casefold() for v in values)


def _format_address(line1, line2, city, state, zip_code) -> str:
    components = [line1 or ""]
    if line2:
        components.append(line2)
    city_state_zip = ", ".join(p for p in (city, state, zip_code) if p)
    if city_state_zip:
        components.append(city_state_zip)
    return "\n".join(components)


class Client(Base):
    __tablename__ = "clients"
    entity = "client"

    id = Column(Integer, primary_key=True)
    first_name = Column(String, nullable=False, default="")
    last_name = Column(String, nullable=False, default="")
    company_name = Column(String, nullable=False, default="")
    phone_number = Column(String, nullable=False, default="")
    phone_label = Column(String, nullable=False, default="Main")
    receives_text_messages = Column(Boolean, nullable=False, default=False)
    email = Column(String, nullable=False, default="")
    lead_source = Column(String, nullable=False, default="")

    property_address = Column(String, nullable=False, default="")
    property_address_line2 = Column(String, nullable=False, default="")
    property_city = Column(String, nullable=False, default="")
    property_state = Column(String, nullable=False, default="")
    property_zip_code = Column(String, nullable=False, default="")
    property_country = Column(String, nullable=False, default=DEFAULT_COUNTRY)

    billing_same_as_property = Column(Boolean, nullable=False, default=True)
    billing_address = Column(String, nullable=False, default="")
    billing_address_line2 = Column(String, nullable=False, default="")
    billing_city = Column(String, nullable=False, default="")
    billing_state = Column(String, nullable=False, default="")
    billing_zip_code = Column(String, nullable=False, default="")
    billing_country = Column(String, nullable=False, default=DEFAULT_COUNTRY)

    created_at = Column(DateTime, nullable=False, default=datetime.now)

    jobs = relationship(
        "Job",
        back_populates="client",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Job.created_at",
    )

    def sync_billing_address(self) -> None:
        """Mirror the property address into the billing fields when they are shared."""
        if self.billing_same_as_property is False:
            return
        for suffix in _BILLING_FIELDS:
            fallback = DEFAULT_COUNTRY if suffix == "country" else ""
            setattr(self, f"billing_{suffix}", getattr(self, f"property_{suffix}") or fallback)

    @property
    def full_name(self) -> str:
        first, last = self.first_name or "", self.last_name or ""
        if not first and not last:
            return self.company_name or UNNAMED_CLIENT
        return f"{first} {last}".strip()

    @property
    def formatted_property_address(self) -> str:
        return _format_address(
            self.property_address,
            self.property_address_line2,
            self.property_city,
            self.property_state,
            self.property_zip_code,
        )

    @property
    def formatted_billing_address(self) -> str:
        if self.billing_same_as_property is not False:
            return self.formatted_property_address
        return _format_address(
            self.billing_address,
            self.billing_address_line2,
            self.billing_city,
            self.billing_state,
            self.billing_zip_code,
        )

    def matches(self, term: str) -> bool:
        return _contains(term, self.full_name, self.property_address, self.email)


class Job(Base):
    __tablename__ = "jobs"
    entity = "job"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=True)
    first_name = Column(String, nullable=False, default="")
    last_name = Column(String, nullable=False, default="")
    property_address = Column(String, nullable=False, default="")
    billing_address = Column(String, nullable=True)
    job_title = Column(String, nullable=False, default="")
    instructions = Column(Text, nullable=False, default="")
    phone_number = Column(String, nullable=False, default="")
    email = Column(String, nullable=False, default="")
    salesperson = Column(String, nullable=False, default="")
    subtotal = Column(Float, nullable=False, default=0.0)
    schedule_later = Column(Boolean, nullable=False, default=False)
    scheduled_date = Column(DateTime, nullable=True)
    team_member = Column(String, nullable=False, default="")
    remind_to_invoice = Column(Boolean, nullable=False, default=False)
    status = Column(String, nullable=False, default="Active")
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    client = relationship("Client", back_populates="jobs", lazy="selectin")
    line_items = relationship(
        "JobLineItem",
        back_populates="job",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="JobLineItem.id",
    )

    @property
    def effective_billing_address(self) -> str:
        return self.billing_address or self.property_address

    def recalculate_subtotal(self) -> float:
        self.subtotal = sum(item.line_total for item in self.line_items)
        return self.subtotal

    def matches(self, term: str) -> bool:
        return _contains(term, self.job_title, self.first_name, self.last_name, self.property_address)


class JobLineItem(Base):
    __tablename__ = "job_line_items"
    entity = "job_line_item"

    id = Column(Integer, primary_key=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False, default="")
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Float, nullable=False, default=0.0)

    job = relationship("Job", back_populates="line_items")

    @property
    def line_total(self) -> float:
        return (self.price or 0.0) * (self.quantity or 0)


class Task(Base):
    __tablename__ = "tasks"
    entity = "task"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    task_description = Column(Text, nullable=False, default="")
    status = Column(String, nullable=False, default="Open")
    priority = Column(String, nullable=False, default="Medium")
    due_date = Column(DateTime, nullable=True)
    is_all_day_task = Column(Boolean, nullable=False, default=False)
    assignee = Column(String, nullable=False, default="")
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    def due_today(self, now: datetime = None) -> bool:
        now = now or datetime.now()
        return self.due_date is not None and self.due_date.date() == now.date()

    def overdue(self, now: datetime = None) -> bool:
        now = now or datetime.now()
        if self.due_date is None:
            return False
        return self.due_date < now and not self.due_today(now)

    @property
    def is_due_today(self) -> bool:
        return self.due_today()

    @property
    def is_overdue(self) -> bool:
        return self.overdue()

    def matches(self, term: str) -> bool:
        return _contains(term, self.title, self.task_description, self.assignee)


class Item(Base):
    __tablename__ = "items"
    entity = "item"

    id = Column(Integer, primary_key=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.now)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    def matches(self, term: str) -> bool:
        return _contains(term, self.timestamp.isoformat() if self.timestamp else "")


class Expense(Base):
    __tablename__ = "expenses"
    entity = "expense"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(String, nullable=False, default="Other")
    date = Column(Date, nullable=False, default=date.today)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    def matches(self, term: str) -> bool:
        return _contains(term, self.name, self.category)


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def tasks_for_day(tasks, day: date):
    """Split the tasks due on ``day`` into (all_day, timed), timed ones ordered by time."""
    all_day, timed = [], []
    for task in tasks:
        if task.due_date is None or task.due_date.date() != day:
            continue
        (all_day if task.is_all_day_task else timed).append(task)
    timed.sort(key=lambda t: t.due_date)
    return all_day, timed


def relative_day(when: str, today: date = None) -> datetime:
    today = today or date.today()
    if when == "today":
        return start_of_day(today)
    if when == "tomorrow":
        return start_of_day(today + timedelta(days=1))
    raise ValueError(f"unknown relative day: {when}")
