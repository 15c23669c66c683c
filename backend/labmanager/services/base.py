import functools
import logging
import math
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from labmanager.constants import STATUS_ACTIVE
from labmanager.exceptions import DependencyExistsError, DuplicateKeyError, NotFoundError, StoreError

logger = logging.getLogger(__name__)


@dataclass
class Page:
    items: list
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total / self.page_size)


def store_operation(action: str):
    """Surface raw SQLAlchemy failures as StoreError; service errors pass through."""

    def decorator(func_):
        @functools.wraps(func_)
        async def wrapper(*args, **kwargs):
            try:
                return await func_(*args, **kwargs)
            except SQLAlchemyError as e:
                logger.exception("Store failure while trying to %s", action)
                raise StoreError(f"Failed to {action}: {e}") from e

        return wrapper

    return decorator


def ilike_any(columns, search: str):
    pattern = f"%{search}%"
    return or_(*[c.ilike(pattern) for c in columns])


async def paginate(db: AsyncSession, query, page: int, page_size: int) -> Page:
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = await db.scalar(count_query) or 0
    result = await db.execute(query.offset((page - 1) * page_size).limit(page_size))
    return Page(items=list(result.scalars().all()), total=total, page=page, page_size=page_size)


class EntityService:
    """CRUD over one model with natural-key, reference and dependency checks.

    Subclasses set the class attributes below and override ``_apply_filters``.
    Every method receives the session it runs against; instances hold no state.
    """

    model = None
    entity_name = ""
    # Columns whose values must be unique across rows (checked when not None)
    natural_keys: tuple = ()
    # field name -> referenced model; a non-null value must point at an existing row
    references: dict = {}
    # (model, fk column name, label): rows that block deletion while they exist
    dependents: tuple = ()
    default_status: Optional[str] = STATUS_ACTIVE

    def _ordering(self) -> tuple:
        return (self.model.id,)

    def _apply_filters(self, query, filters: dict):
        return query

    @staticmethod
    def _dump(data, exclude_unset: bool) -> dict:
        if isinstance(data, BaseModel):
            return data.model_dump(exclude_unset=exclude_unset)
        return dict(data)

    async def list(self, filters: Optional[dict], page: int, page_size: int, db: AsyncSession) -> Page:
        return await self._list(filters or {}, page, page_size, db)

    async def _list(self, filters: dict, page: int, page_size: int, db: AsyncSession) -> Page:
        query = self._apply_filters(select(self.model), filters).order_by(*self._ordering())
        try:
            return await paginate(db, query, page, page_size)
        except SQLAlchemyError as e:
            logger.exception("Store failure while listing %s", self.entity_name)
            raise StoreError(f"Failed to fetch {self.entity_name} list: {e}") from e

    async def get_by_id(self, entity_id: int, db: AsyncSession):
        """Return the row, or None when no row has this id."""
        try:
            result = await db.execute(select(self.model).where(self.model.id == entity_id))
        except SQLAlchemyError as e:
            logger.exception("Store failure while fetching %s %s", self.entity_name, entity_id)
            raise StoreError(f"Failed to fetch {self.entity_name}: {e}") from e
        return result.scalar_one_or_none()

    async def get_or_raise(self, entity_id: int, db: AsyncSession):
        entity = await self.get_by_id(entity_id, db)
        if entity is None:
            raise NotFoundError(self.entity_name, entity_id)
        return entity

    async def _check_unique(self, values: dict, db: AsyncSession, exclude_id: Optional[int] = None) -> None:
        for key in self.natural_keys:
            value = values.get(key)
            if value is None:
                continue
            column = getattr(self.model, key)
            query = select(self.model.id).where(column == value)
            if exclude_id is not None:
                query = query.where(self.model.id != exclude_id)
            existing = await db.scalar(query.limit(1))
            if existing is not None:
                logger.warning("Rejected %s: %s '%s' already taken", self.entity_name, key, value)
                raise DuplicateKeyError(self.entity_name, key, value)

    async def _check_references(self, values: dict, db: AsyncSession) -> None:
        for field, ref_model in self.references.items():
            ref_id = values.get(field)
            if ref_id is None:
                continue
            found = await db.scalar(select(ref_model.id).where(ref_model.id == ref_id))
            if found is None:
                raise NotFoundError(ref_model.__name__, ref_id)

    async def _check_dependents(self, entity, db: AsyncSession) -> None:
        for dep_model, fk_name, label in self.dependents:
            fk = getattr(dep_model, fk_name)
            found = await db.scalar(select(dep_model.id).where(fk == entity.id).limit(1))
            if found is not None:
                logger.warning(
                    "Rejected delete of %s %s: referenced by %s", self.entity_name, entity.id, label
                )
                raise DependencyExistsError(self.entity_name, entity.id, label)

    async def _flush(self, entity, values: dict, db: AsyncSession) -> None:
        """Flush and map a unique-index violation back to the offending natural key."""
        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            detail = str(e.orig)
            for key in self.natural_keys:
                if key in detail and values.get(key) is not None:
                    logger.warning("Store rejected %s: duplicate %s", self.entity_name, key)
                    raise DuplicateKeyError(self.entity_name, key, values[key]) from e
            logger.exception("Integrity failure while writing %s", self.entity_name)
            raise StoreError(f"Failed to save {self.entity_name}: {detail}") from e
        await db.refresh(entity)

    def _natural_key_label(self, entity) -> str:
        if self.natural_keys:
            return str(getattr(entity, self.natural_keys[0]))
        return str(entity.id)

    async def create(self, data, db: AsyncSession):
        values = self._dump(data, exclude_unset=False)
        if self.default_status is not None and not values.get("status"):
            values["status"] = self.default_status
        try:
            await self._check_unique(values, db)
            await self._check_references(values, db)
            entity = self.model(**values)
            db.add(entity)
            await self._flush(entity, values, db)
        except SQLAlchemyError as e:
            logger.exception("Store failure while creating %s", self.entity_name)
            raise StoreError(f"Failed to create {self.entity_name}: {e}") from e
        logger.info("Created %s %s", self.entity_name, self._natural_key_label(entity))
        return entity

    async def update(self, entity_id: int, data, db: AsyncSession):
        values = self._dump(data, exclude_unset=True)
        values.pop("id", None)
        try:
            entity = await self.get_or_raise(entity_id, db)
            await self._check_unique(values, db, exclude_id=entity_id)
            await self._check_references(values, db)
            for key, value in values.items():
                setattr(entity, key, value)
            await self._flush(entity, values, db)
        except SQLAlchemyError as e:
            logger.exception("Store failure while updating %s %s", self.entity_name, entity_id)
            raise StoreError(f"Failed to update {self.entity_name}: {e}") from e
        logger.info("Updated %s %s", self.entity_name, self._natural_key_label(entity))
        return entity

    async def delete(self, entity_id: int, db: AsyncSession) -> None:
        try:
            entity = await self.get_or_raise(entity_id, db)
            await self._check_dependents(entity, db)
            label = self._natural_key_label(entity)
            await db.delete(entity)
            await db.flush()
        except SQLAlchemyError as e:
            logger.exception("Store failure while deleting %s %s", self.entity_name, entity_id)
            raise StoreError(f"Failed to delete {self.entity_name}: {e}") from e
        logger.info("Deleted %s %s", self.entity_name, label)
