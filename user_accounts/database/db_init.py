import logging
import sys

from .database import Database, DEFAULT_DATABASE_URL
from . import models  # noqa: F401  테이블 등록을 위해 필요

logger = logging.getLogger(__name__)


def initialize_db(database: Database) -> None:
    """
    DB와 테이블을 생성합니다.
    SQLAlchemy 모델을 사용하여 모든 작업을 수행합니다.
    """
    logger.info("Initializing database at %s", database.url)
    database.create_all()
    logger.info("Tables created.")


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    url = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_DATABASE_URL
    database = Database(url)
    try:
        initialize_db(database)
    finally:
        database.dispose()
