"""
Database connection and session management
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
import structlog

logger = structlog.get_logger(__name__)

# Create base class for models
Base = declarative_base()


class Database:
    """Owns the engine and session factory for the lifetime of the process"""

    def __init__(self, database_url: str, echo: bool = False):
        self.url = database_url
        engine_kwargs = {"echo": echo, "pool_pre_ping": True}
        if database_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
                # One shared connection, otherwise every session sees an empty database
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_recycle"] = 300

        self.engine = create_engine(database_url, **engine_kwargs)
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def create_all(self):
        """Create tables for every registered model"""
        # Import all models to ensure they are registered
        from devicewatch.models import device, reading  # noqa

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables created successfully", dialect=self.dialect)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Session that commits on success and rolls back on error"""
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return False

    def close(self):
        self.engine.dispose()
        logger.info("Database engine disposed")

