#Description: SQLAlchemy engine/session factory and DB initializer.
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from utils.config import settings

def make_engine(url: str | None = None) -> Engine:
    url = url or settings.DATABASE_URL
    # sessions are opened from worker threads (asyncio.to_thread)
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=False, future=True, pool_pre_ping=True, connect_args=connect_args)

def make_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)

def init_db(engine: Engine):
    from models.orm import Base
    Base.metadata.create_all(bind=engine)
