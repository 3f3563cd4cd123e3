# sweeply/models.py
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class TaskStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    ON_HOLD = "On Hold"


class TaskPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


EXPENSE_CATEGORIES = [
    "Supplies",
    "Travel",
    "Equipment",
    "Marketing",
    "Staff",
    "Utilities",
    "Rent",
    "Other",
]


class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class ClientOut(_Record):
    id: int
    first_name: str
    last_name: str
    company_name: str
    full_name: str
    phone_number: str
    phone_label: str
    receives_text_messages: bool
    email: str
    lead_source: str
    property_address: str
    property_address_line2: str
    property_city: str
    property_state: str
    property_zip_code: str
    property_country: str
    billing_same_as_property: bool
    billing_address: str
    billing_address_line2: str
    billing_city: str
    billing_state: str
    billing_zip_code: str
    billing_country: str
    formatted_property_address: str
    formatted_billing_address: str
    created_at: datetime


class LineItemOut(_Record):
    id: int
    name: str
    quantity: int
    price: float
    line_total: float


class JobOut(_Record):
    id: int
    client_id: Optional[int] = None
    first_name: str
    last_name: str
    property_address: str
    effective_billing_address: str
    job_title: str
    instructions: str
    phone_number: str
    email: str
    salesperson: str
    subtotal: float
    schedule_later: bool
    scheduled_date: Optional[datetime] = None
    team_member: str
    remind_to_invoice: bool
    status: str
    line_items: List[LineItemOut] = []
    created_at: datetime


class ClientDetailOut(ClientOut):
    jobs: List[JobOut] = []


class TaskOut(_Record):
    id: int
    title: str
    task_description: str
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    is_all_day_task: bool
    assignee: str
    is_due_today: bool
    is_overdue: bool
    created_at: datetime


class DayScheduleOut(BaseModel):
    day: date
    all_day: List[TaskOut]
    timed: List[TaskOut]


class ItemOut(_Record):
    id: int
    timestamp: datetime


class ExpenseOut(_Record):
    id: int
    name: str
    amount: float
    category: str
    date: date
    notes: Optional[str] = None
    created_at: datetime


class CategorySum(BaseModel):
    category: str
    sum: float


class ExpenseSummaryOut(BaseModel):
    expenses: List[ExpenseOut]
    total: float
    by_category: List[CategorySum]
