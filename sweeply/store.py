# sweeply/store.py
"""Repositories over the local SQLite store.

Each repository exposes ``list/get/create/update/delete`` returning plain ORM
records (detached, eagerly loaded) and publishes a ``ChangeEvent`` after every
committed write. Views subscribe instead of polling.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Generic, List, Optional, Type, TypeVar

from sqlalchemy import inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from .tables import Client, Expense, Item, Job, Task

log = logging.getLogger(__name__)

T = TypeVar("T")


class StoreError(Exception):
    """A local store read or write failed."""


class RecordNotFound(StoreError):
    def __init__(self, entity: str, record_id: Any):
        super().__init__(f"{entity} {record_id} not found")
        self.entity = entity
        self.record_id = record_id


@dataclass(frozen=True)
class ChangeEvent:
    entity: str
    action: str  # "created" | "updated" | "deleted"
    id: int


Listener = Callable[[ChangeEvent], None]


class ChangeFeed:
    """Fan-out of change events to callbacks and async queues."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, events: List[ChangeEvent]) -> None:
        for event in events:
            for listener in list(self._listeners):
                try:
                    listener(event)
                except Exception:
                    log.exception("change listener failed for %s", event)

    async def stream(self) -> AsyncIterator[ChangeEvent]:
        queue: asyncio.Queue = asyncio.Queue()
        unsubscribe = self.subscribe(queue.put_nowait)
        try:
            while True:
                yield await queue.get()
        finally:
            unsubscribe()


class Repository(Generic[T]):
    model: Type[T]
    sort_column = "created_at"

    def __init__(self, sessionmaker: async_sessionmaker, feed: ChangeFeed, model: Type[T] = None):
        self._sessionmaker = sessionmaker
        self._feed = feed
        if model is not None:
            self.model = model
        self._columns = {attr.key for attr in inspect(self.model).column_attrs}

    @property
    def entity(self) -> str:
        return self.model.entity

    # ── reads ────────────────────────────────────────────────────────────────
    async def list(
        self,
        *,
        search: Optional[str] = None,
        newest_first: bool = False,
        **filters: Any,
    ) -> List[T]:
        stmt = select(self.model)
        for key, value in filters.items():
            stmt = stmt.where(getattr(self.model, self._column(key)) == value)
        order = getattr(self.model, self.sort_column)
        if newest_first:
            stmt = stmt.order_by(order.desc(), self.model.id.desc())
        else:
            stmt = stmt.order_by(order, self.model.id)
        try:
            async with self._sessionmaker() as session:
                rows = list((await session.execute(stmt)).scalars().all())
        except SQLAlchemyError as e:
            raise StoreError(f"{self.entity} list failed: {e}") from e
        if search:
            rows = [r for r in rows if r.matches(search)]
        return rows

    async def get(self, record_id: int) -> Optional[T]:
        try:
            async with self._sessionmaker() as session:
                return await session.get(self.model, record_id)
        except SQLAlchemyError as e:
            raise StoreError(f"{self.entity} get failed: {e}") from e

    async def require(self, record_id: int) -> T:
        record = await self.get(record_id)
        if record is None:
            raise RecordNotFound(self.entity, record_id)
        return record

    # ── writes ───────────────────────────────────────────────────────────────
    async def create(self, record: T) -> T:
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    self._before_save(record)
                    session.add(record)
                    await session.flush()
                    await session.refresh(record)
                    events = self._created_events(record)
        except SQLAlchemyError as e:
            raise StoreError(f"{self.entity} create failed: {e}") from e
        self._feed.publish(events)
        return record

    async def update(self, record_id: int, **values: Any) -> T:
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    record = await session.get(self.model, record_id)
                    if record is None:
                        raise RecordNotFound(self.entity, record_id)
                    for key, value in values.items():
                        setattr(record, self._column(key), value)
                    self._before_save(record)
                    await session.flush()
                    await session.refresh(record)
        except SQLAlchemyError as e:
            raise StoreError(f"{self.entity} update failed: {e}") from e
        self._feed.publish([ChangeEvent(self.entity, "updated", record_id)])
        return record

    async def delete(self, record_id: int) -> None:
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    record = await session.get(self.model, record_id)
                    if record is None:
                        raise RecordNotFound(self.entity, record_id)
                    events = self._deleted_events(record)
                    await session.delete(record)
        except SQLAlchemyError as e:
            raise StoreError(f"{self.entity} delete failed: {e}") from e
        self._feed.publish(events)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` for this repository's entity only."""
        entity = self.entity

        def _filtered(event: ChangeEvent) -> None:
            if event.entity == entity:
                listener(event)

        return self._feed.subscribe(_filtered)

    # ── hooks ────────────────────────────────────────────────────────────────
    def _column(self, key: str) -> str:
        if key not in self._columns:
            raise StoreError(f"{self.entity} has no field {key!r}")
        return key

    def _before_save(self, record: T) -> None:
        pass

    def _created_events(self, record: T) -> List[ChangeEvent]:
        return [ChangeEvent(self.entity, "created", record.id)]

    def _deleted_events(self, record: T) -> List[ChangeEvent]:
        return [ChangeEvent(self.entity, "deleted", record.id)]


class ClientRepository(Repository[Client]):
    model = Client

    def _before_save(self, record: Client) -> None:
        record.sync_billing_address()

    def _deleted_events(self, record: Client) -> List[ChangeEvent]:
        # jobs and their line items go with the client in the same transaction
        cascaded = [ChangeEvent("job", "deleted", job.id) for job in record.jobs]
        return [ChangeEvent(self.entity, "deleted", record.id)] + cascaded


class JobRepository(Repository[Job]):
    model = Job

    def _before_save(self, record: Job) -> None:
        record.recalculate_subtotal()
        if record.client is not None and record.client.id is None:
            record.client.sync_billing_address()

    async def create(self, record: Job) -> Job:
        # a client typed into the job form is inserted in the same write
        new_client = record.client if record.client is not None and record.client.id is None else None
        await super().create(record)
        if new_client is not None:
            self._feed.publish([ChangeEvent("client", "created", new_client.id)])
        return record


class TaskRepository(Repository[Task]):
    model = Task


class ItemRepository(Repository[Item]):
    model = Item
    sort_column = "timestamp"


class ExpenseRepository(Repository[Expense]):
    model = Expense
    sort_column = "date"


class Store:
    """All repositories of the app, sharing one session factory and change feed."""

    def __init__(self, sessionmaker: async_sessionmaker):
        self.feed = ChangeFeed()
        self.clients = ClientRepository(sessionmaker, self.feed)
        self.jobs = JobRepository(sessionmaker, self.feed)
        self.tasks = TaskRepository(sessionmaker, self.feed)
        self.items = ItemRepository(sessionmaker, self.feed)
        self.expenses = ExpenseRepository(sessionmaker, self.feed)

    def changes(self) -> AsyncIterator[ChangeEvent]:
        return self.feed.stream()
