from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .settings import Settings

# Base class for models
Base = declarative_base()


class Database:
    """Engine + session factory construidos a partir de la configuración"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine = self._create_engine(settings)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @staticmethod
    def _create_engine(settings: Settings) -> Engine:
        url = settings.database_url
        if url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if ":memory:" in url or url.rstrip("/") == "sqlite:":
                kwargs["poolclass"] = StaticPool
            engine = create_engine(url, echo=settings.debug, **kwargs)

            # SQLite no aplica FKs (ni ON DELETE CASCADE) sin este pragma
            @event.listens_for(engine, "connect")
            def _enable_foreign_keys(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

            return engine

        return create_engine(
            url,
            pool_pre_ping=True,
            pool_recycle=300,
            echo=settings.debug
        )

    def create_all(self):
        Base.metadata.create_all(bind=self.engine)

    def dispose(self):
        self.engine.dispose()


# Database dependency
def get_db(request: Request) -> Iterator[Session]:
    """Database dependency for FastAPI"""
    db = request.app.state.database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
