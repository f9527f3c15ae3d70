import logging

from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)


def init_db() -> None:
    logger.info("Ensuring tables exist (%d known)", len(Base.metadata.tables))
    Base.metadata.create_all(bind=engine)
