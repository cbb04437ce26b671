from typing import Any

from app.db.session import DbSession


class RepositoryBase:
    model_class: Any = None

    def __init__(self, db_session: DbSession) -> None:
        self.db_session = db_session
