from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import settings

DATABASE_URL = settings.DATABASE_URL

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def init_db():
    """Create database tables defined on Base subclasses.

    Called from the startup hook. In production you should run migrations
    (Alembic) instead of create_all.
    """
    from . import models  # noqa: F401  registers the tables on Base

    Base.metadata.create_all(bind=engine)
