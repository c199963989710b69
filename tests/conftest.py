# File: tests/conftest.py

import pytest
import os
import sys
import tempfile
from pathlib import Path

# 1. Add project root to path
sys.path.append(os.getcwd())

# 2. Point the job store at a throwaway SQLite file (before settings are used)
_DB_DIR = Path(tempfile.mkdtemp(prefix="splicer-tests-"))
os.environ.setdefault("SPLICER_DATABASE_URL", f"sqlite:///{_DB_DIR / 'jobs.db'}")

from splicer.core.database.base import Base
from splicer.core.database.connection import engine


@pytest.fixture(scope="session", autouse=True)
def global_setup():
    """
    Runs once per test session.
    Creates the job tables.
    """
    import splicer.core.jobs.models

    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
