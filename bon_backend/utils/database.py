from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from bon_backend.core.config import DATABASE_URL


def build_engine(url: str, **kwargs):
    if url.startswith("sqlite"):
        # SQLite: one connection shared across the request threads
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        return create_engine(url, echo=False, future=True, **kwargs)

    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,  # drops dead connections automatically
        pool_size=5,
        max_overflow=10,
        future=True,
        **kwargs,
    )


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
