# File: splicer/core/database/base.py

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Constraint and index names for every table in the job store.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Registry for the job store tables (currently only `edit_jobs`)."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
