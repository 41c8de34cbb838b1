"""Database configuration and session management for the finding register."""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ehs_audit.config import settings

# In-memory SQLite by default: the register lasts as long as the hosting session.
SQLALCHEMY_DATABASE_URL = settings.REGISTER_DATABASE_URL

Base = declarative_base()


def make_engine(url: str = SQLALCHEMY_DATABASE_URL):
    """Build an engine; in-memory SQLite shares one connection across threads."""
    if url.startswith("sqlite"):
        # SQLite-specific config
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, pool_pre_ping=True)


engine = make_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency for FastAPI endpoints to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
