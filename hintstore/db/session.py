from sqlalchemy.engine import Engine
from sqlmodel import Session, create_engine
from hintstore.core.config import settings


def build_engine(url: str) -> Engine:
    connect_args = {}
    if url.startswith('sqlite'):
        # worker threads share the pool
        connect_args['check_same_thread'] = False
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


engine = build_engine(settings.DATABASE_URL)


def get_session():
    with Session(engine) as session:
        yield session
