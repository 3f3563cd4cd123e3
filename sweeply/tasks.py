# sweeply/tasks.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from .deps import get_store, save_form
from .forms import SaveOutcome, TaskDraft
from .models import DayScheduleOut, TaskOut, TaskStatus
from .store import Store
from .tables import relative_day, start_of_day, tasks_for_day

router = APIRouter(prefix="/tasks", tags=["tasks"])


class ScheduleIn(BaseModel):
    when: str  # "unscheduled" | "today" | "tomorrow" | "date"
    day: Optional[date] = None


class AssignIn(BaseModel):
    assignee: str = ""  # "" is unassigned


@router.get("", response_model=List[TaskOut])
async def list_tasks(
    status: Optional[TaskStatus] = Query(default=None),
    search: Optional[str] = Query(default=None),
    store: Store = Depends(get_store),
):
    filters = {"status": status.value} if status else {}
    return await store.tasks.list(search=search, newest_first=True, **filters)


@router.get("/schedule", response_model=DayScheduleOut)
async def day_schedule(day: date = Query(...), store: Store = Depends(get_store)):
    all_day, timed = tasks_for_day(await store.tasks.list(), day)
    return DayScheduleOut(
        day=day,
        all_day=[TaskOut.model_validate(t) for t in all_day],
        timed=[TaskOut.model_validate(t) for t in timed],
    )


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(task_id: int, store: Store = Depends(get_store)):
    return await store.tasks.require(task_id)


@router.post("", response_model=SaveOutcome, status_code=201)
async def create_task(payload: TaskDraft, store: Store = Depends(get_store)):
    return await save_form(payload, store.tasks)


@router.put("/{task_id}", response_model=SaveOutcome)
async def update_task(task_id: int, payload: TaskDraft, store: Store = Depends(get_store)):
    return await save_form(payload, store.tasks, record_id=task_id)


@router.post("/{task_id}/complete", response_model=TaskOut)
async def complete_task(task_id: int, store: Store = Depends(get_store)):
    return await store.tasks.update(task_id, status=TaskStatus.COMPLETED.value)


@router.post("/{task_id}/schedule", response_model=TaskOut)
async def schedule_task(task_id: int, payload: ScheduleIn, store: Store = Depends(get_store)):
    if payload.when == "unscheduled":
        due = None
    elif payload.when in ("today", "tomorrow"):
        due = relative_day(payload.when)
    elif payload.when == "date" and payload.day is not None:
        due = start_of_day(payload.day)
    else:
        raise HTTPException(status_code=422, detail="when must be unscheduled, today, tomorrow or date (with day)")
    return await store.tasks.update(task_id, due_date=due)


@router.post("/{task_id}/assign", response_model=TaskOut)
async def assign_task(task_id: int, payload: AssignIn, store: Store = Depends(get_store)):
    return await store.tasks.update(task_id, assignee=payload.assignee.strip())


@router.delete("/{task_id}")
async def delete_task(task_id: int, store: Store = Depends(get_store)):
    await store.tasks.delete(task_id)
    return {"ok": True}
