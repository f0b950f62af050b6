"""Database setup: SQLite file by default, any SQLAlchemy URL via the environment."""
import os
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

DB_PATH = Path(__file__).resolve().parent / "scrimmages.db"

# SCRIMMAGE_DATABASE_URL overrides the bundled SQLite file (tests, deployments)
DATABASE_URL = os.environ.get("SCRIMMAGE_DATABASE_URL", f"sqlite:///{DB_PATH}")
IS_SQLITE = DATABASE_URL.startswith("sqlite")

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if IS_SQLITE else {},
    echo=os.environ.get("SCRIMMAGE_SQL_ECHO", "") == "1",
)

if IS_SQLITE:
    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_conn, _record):
        # rounds and participants are removed with their scrimmage
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
