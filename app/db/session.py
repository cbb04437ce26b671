from types import TracebackType
from typing import Any, Type, TypeVar

from sqlalchemy import Engine
from sqlalchemy.orm import Session

T = TypeVar("T")


class DbSession:
    """
    Thin wrapper around a SQLAlchemy session that hands out repositories bound to it.
    Use as a context manager; the session is closed on exit.
    """

    def __init__(self, engine: Engine) -> None:
        self.session = Session(engine, expire_on_commit=False)

    def __enter__(self) -> "DbSession":
        return self

    def __exit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.session.close()

    def get_repository(self, repository_class: Type[T]) -> T:
        return repository_class(self)  # type: ignore[call-arg]

    def add(self, entry: Any) -> None:
        self.session.add(entry)

    def merge(self, entry: Any) -> Any:
        return self.session.merge(entry)

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
