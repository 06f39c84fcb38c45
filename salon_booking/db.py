# salon_booking/db.py

import os

from sqlmodel import SQLModel, create_engine, Session

# SQLite database (file-based) unless overridden
DATABASE_URL = os.getenv("SALON_DATABASE_URL", "sqlite:///./salon.db")

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# Engine = connection to the database
engine = create_engine(
    DATABASE_URL,
    echo=False,          # set to True to see SQL
    connect_args=connect_args,  # required for SQLite + FastAPI
)


def create_db_and_tables():
    from . import models  # noqa: F401  registers the tables

    SQLModel.metadata.create_all(engine)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
