# tests/conftest.py
import pytest

from user_accounts.database import Database

@pytest.fixture
def database():
    """테이블이 생성된 인메모리 SQLite 저장소 핸들을 생성합니다."""
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()

@pytest.fixture
def db_session(database: Database):
    session = database.session()
    yield session
    session.close()
