# File: splicer/core/database/connection.py

from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from splicer.core.config.settings import settings

# SQLite will not create the directory holding the database file.
if settings.DATABASE_URL.startswith("sqlite:///"):
    Path(settings.DATABASE_URL[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)

# check_same_thread=False is needed only for SQLite
connect_args = {"check_same_thread": False} if "sqlite" in settings.DATABASE_URL else {}

engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
    connect_args=connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db():
    """Dependency for obtaining a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
