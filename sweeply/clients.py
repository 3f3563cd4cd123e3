# sweeply/clients.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from .deps import get_store, save_form
from .forms import ClientDraft, SaveOutcome
from .models import ClientDetailOut, ClientOut
from .store import Store

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("", response_model=List[ClientOut])
async def list_clients(
    search: Optional[str] = Query(default=None),
    recent: bool = Query(default=False),
    store: Store = Depends(get_store),
):
    return await store.clients.list(search=search, newest_first=recent)


@router.get("/{client_id}", response_model=ClientDetailOut)
async def get_client(client_id: int, store: Store = Depends(get_store)):
    return await store.clients.require(client_id)


@router.post("", response_model=SaveOutcome, status_code=201)
async def create_client(payload: ClientDraft, store: Store = Depends(get_store)):
    return await save_form(payload, store.clients)


@router.put("/{client_id}", response_model=SaveOutcome)
async def update_client(client_id: int, payload: ClientDraft, store: Store = Depends(get_store)):
    return await save_form(payload, store.clients, record_id=client_id)


@router.delete("/{client_id}")
async def delete_client(client_id: int, store: Store = Depends(get_store)):
    # jobs and their line items go with it
    await store.clients.delete(client_id)
    return {"ok": True}
