"""Base repository for entities addressed by a stable business key."""

from typing import Any, ClassVar, Generic, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prompt_blocks.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class KeyedRepository(Generic[ModelType]):
    """Base repository with key-scoped query methods.

    Subclasses set ``key_field`` to the name of the unique string column
    that identifies a row (e.g. ``"block_id"``).
    """

    key_field: ClassVar[str]

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """Initialize repository with model and session."""
        self.model = model
        self.session = session

    @property
    def _key_column(self):
        return getattr(self.model, self.key_field)

    async def get_by_key(self, key: str) -> ModelType | None:
        """Get entity by its business key."""
        stmt = select(self.model).where(self._key_column == key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self) -> list[ModelType]:
        """List all entities ordered by key."""
        stmt = select(self.model).order_by(self._key_column)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def upsert(self, key: str, **data: Any) -> ModelType:
        """Create the entity for ``key`` or update the given fields in place."""
        instance = await self.get_by_key(key)
        if instance is None:
            instance = self.model(**{self.key_field: key}, **data)
            self.session.add(instance)
        else:
            for field, value in data.items():
                setattr(instance, field, value)

        await self.session.commit()
        await self.session.refresh(instance)
        return instance
