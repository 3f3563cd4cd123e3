# tests/test_tables.py
from datetime import date, datetime

from sweeply.tables import Client, Job, JobLineItem, Task, relative_day, tasks_for_day


def test_full_name_fallbacks():
    assert Client(first_name="Ann", last_name="Lee").full_name == "Ann Lee"
    assert Client(first_name="Ann", last_name="").full_name == "Ann"
    assert Client(first_name="", last_name="", company_name="Acme").full_name == "Acme"
    assert Client(first_name="", last_name="", company_name="").full_name == "Unnamed Client"


def test_formatted_addresses():
    c = Client(
        property_address="1 Main St",
        property_address_line2="Apt 2",
        property_city="Springfield",
        property_state="IL",
        property_zip_code="62701",
        billing_same_as_property=True,
    )
    assert c.formatted_property_address == "1 Main St\nApt 2\nSpringfield, IL, 62701"
    assert c.formatted_billing_address == c.formatted_property_address

    c.billing_same_as_property = False
    c.billing_address = "PO Box 9"
    c.billing_city = "Chicago"
    assert c.formatted_billing_address == "PO Box 9\nChicago"


def test_sync_billing_address_copies_property_fields():
    c = Client(property_address="1 Main St", property_city="Springfield", billing_same_as_property=True)
    c.sync_billing_address()
    assert c.billing_address == "1 Main St"
    assert c.billing_city == "Springfield"
    assert c.billing_country == "United States"


def test_job_subtotal_and_billing_fallback():
    job = Job(property_address="1 Main St", billing_address=None)
    job.line_items = [JobLineItem(name="Windows", quantity=3, price=10.0), JobLineItem(name="Gutters", quantity=1, price=45.5)]
    assert job.recalculate_subtotal() == 75.5
    assert job.effective_billing_address == "1 Main St"


def test_task_due_flags():
    now = datetime(2024, 5, 10, 15, 0)
    assert Task(title="a", due_date=datetime(2024, 5, 10, 9, 0)).due_today(now)
    assert not Task(title="a", due_date=datetime(2024, 5, 10, 9, 0)).overdue(now)
    assert Task(title="b", due_date=datetime(2024, 5, 9, 9, 0)).overdue(now)
    assert not Task(title="c").due_today(now)
    assert not Task(title="c").overdue(now)


def test_tasks_for_day_splits_and_orders():
    day = date(2024, 5, 10)
    late = Task(title="late", due_date=datetime(2024, 5, 10, 16, 0), is_all_day_task=False)
    early = Task(title="early", due_date=datetime(2024, 5, 10, 8, 0), is_all_day_task=False)
    all_day = Task(title="all day", due_date=datetime(2024, 5, 10), is_all_day_task=True)
    other = Task(title="other", due_date=datetime(2024, 5, 11, 8, 0), is_all_day_task=False)

    all_day_tasks, timed = tasks_for_day([late, all_day, other, early], day)
    assert [t.title for t in all_day_tasks] == ["all day"]
    assert [t.title for t in timed] == ["early", "late"]


def test_relative_day():
    today = date(2024, 12, 31)
    assert relative_day("today", today) == datetime(2024, 12, 31)
    assert relative_day("tomorrow", today) == datetime(2025, 1, 1)
