"""
Database engine, session factory and unit-of-work helper
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from storefront.config import settings
from storefront.errors import DependencyError

logger = logging.getLogger(__name__)

engine = create_engine(settings.DATABASE_URL, echo=settings.DB_ECHO, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding a request-scoped session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create all tables"""
    # Import models so they register with Base.metadata
    from storefront.models import inventory, order  # noqa: F401

    Base.metadata.create_all(bind=engine)


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Atomic unit wrapping every write of one order/inventory operation

    Commits on clean exit. Any exception rolls back everything written
    through ``db`` since the last commit; SQLAlchemy errors surface as
    DependencyError.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Transaction rolled back after database error", exc_info=True)
        raise DependencyError(f"Database operation failed: {e}") from e
    except Exception:
        db.rollback()
        raise
