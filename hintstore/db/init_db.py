from sqlmodel import SQLModel
from hintstore.db.session import engine
from hintstore.core.config import settings
from hintstore.models import notification_hint  # noqa: F401


def init_db(drop_all: bool = False) -> None:
    if drop_all:
        SQLModel.metadata.drop_all(engine)
    if (
        settings.DATABASE_URL.startswith('sqlite')
        or settings.ENV != 'production'
        or settings.AUTO_CREATE_TABLES
    ):
        SQLModel.metadata.create_all(engine)
