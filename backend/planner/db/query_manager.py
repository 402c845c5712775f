"""Chainable query helpers exposed on models as ``Model.objects``."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlmodel import SQLModel, col, select

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession
    from sqlmodel.sql.expression import SelectOfScalar

ModelT = TypeVar("ModelT", bound=SQLModel)


class ModelQuery(Generic[ModelT]):
    """Immutable wrapper around a ``select(Model)`` statement."""

    def __init__(self, model: type[ModelT], statement: SelectOfScalar[ModelT] | None = None) -> None:
        self.model = model
        self.statement: SelectOfScalar[ModelT] = (
            statement if statement is not None else select(model)
        )

    def _derive(self, statement: SelectOfScalar[ModelT]) -> ModelQuery[ModelT]:
        return ModelQuery(self.model, statement)

    def filter_by(self, **kwargs: Any) -> ModelQuery[ModelT]:
        return self._derive(self.statement.filter_by(**kwargs))

    def filter(self, *criteria: Any) -> ModelQuery[ModelT]:
        return self._derive(self.statement.where(*criteria))

    def order_by(self, *clauses: Any) -> ModelQuery[ModelT]:
        return self._derive(self.statement.order_by(*clauses))

    def offset(self, value: int) -> ModelQuery[ModelT]:
        return self._derive(self.statement.offset(value))

    def limit(self, value: int) -> ModelQuery[ModelT]:
        return self._derive(self.statement.limit(value))

    def for_update(self) -> ModelQuery[ModelT]:
        """Lock selected rows until the transaction ends (no-op on SQLite)."""
        return self._derive(self.statement.with_for_update())

    async def first(self, session: AsyncSession) -> ModelT | None:
        return (await session.exec(self.statement.limit(1))).first()

    async def all(self, session: AsyncSession) -> list[ModelT]:
        return list(await session.exec(self.statement))


class QueryManager:
    """Descriptor returning a model-bound query entry point."""

    def __get__(self, instance: object, owner: type[ModelT]) -> ModelManager[ModelT]:
        return ModelManager(owner)


class ModelManager(Generic[ModelT]):
    """Entry points for building queries against one model."""

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    def query(self) -> ModelQuery[ModelT]:
        return ModelQuery(self.model)

    def by_id(self, value: object) -> ModelQuery[ModelT]:
        return self.query().filter(col(self.model.id) == value)  # type: ignore[attr-defined]

    def filter_by(self, **kwargs: Any) -> ModelQuery[ModelT]:
        return self.query().filter_by(**kwargs)

    def filter(self, *criteria: Any) -> ModelQuery[ModelT]:
        return self.query().filter(*criteria)
