# sweeply/jobs.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from .deps import get_store, save_form
from .forms import JobDraft, SaveOutcome
from .models import JobOut
from .store import Store

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=List[JobOut])
async def list_jobs(
    status: Optional[str] = Query(default=None),
    client_id: Optional[int] = Query(default=None),
    search: Optional[str] = Query(default=None),
    store: Store = Depends(get_store),
):
    filters = {}
    if status:
        filters["status"] = status
    if client_id is not None:
        filters["client_id"] = client_id
    return await store.jobs.list(search=search, newest_first=True, **filters)


@router.get("/{job_id}", response_model=JobOut)
async def get_job(job_id: int, store: Store = Depends(get_store)):
    return await store.jobs.require(job_id)


@router.post("", response_model=SaveOutcome, status_code=201)
async def create_job(payload: JobDraft, store: Store = Depends(get_store)):
    if payload.client_id is not None:
        # ensure the picked client still exists
        await store.clients.require(payload.client_id)
    return await save_form(payload, store.jobs)


@router.put("/{job_id}", response_model=SaveOutcome)
async def update_job(job_id: int, payload: JobDraft, store: Store = Depends(get_store)):
    if payload.client_id is not None:
        await store.clients.require(payload.client_id)
    return await save_form(payload, store.jobs, record_id=job_id)


@router.delete("/{job_id}")
async def delete_job(job_id: int, store: Store = Depends(get_store)):
    await store.jobs.delete(job_id)
    return {"ok": True}
