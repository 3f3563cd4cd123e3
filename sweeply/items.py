# sweeply/items.py
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends

from .deps import get_store
from .models import ItemOut
from .store import Store
from .tables import Item

router = APIRouter(prefix="/items", tags=["items"])


@router.get("", response_model=List[ItemOut])
async def list_items(store: Store = Depends(get_store)):
    return await store.items.list()


@router.post("", response_model=ItemOut, status_code=201)
async def add_item(store: Store = Depends(get_store)):
    return await store.items.create(Item(timestamp=datetime.now()))


@router.delete("/{item_id}")
async def delete_item(item_id: int, store: Store = Depends(get_store)):
    await store.items.delete(item_id)
    return {"ok": True}
