from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

from todoapp.config import SETTINGS

engine = create_engine(SETTINGS.database_url, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def init_db(bind=engine) -> None:
    with bind.connect() as connection:
        connection.execute(text("SELECT 1"))
    # SQLite files are created on first use; server databases go through alembic.
    if bind.dialect.name == "sqlite":
        from . import models  # noqa: F401

        Base.metadata.create_all(bind)
