import os

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# 데이터베이스 연결 문자열. 환경 변수로 덮어쓸 수 있습니다.
DEFAULT_DATABASE_URL = os.environ.get(
    "USER_ACCOUNTS_DATABASE_URL", "sqlite:///user_accounts.db"
)

# 모든 세션이 하나의 연결을 공유하는 인메모리 SQLite URL (테스트 전용)
IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")

# 모든 모델 클래스가 상속받을 Base 클래스
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite는 연결마다 외래 키 검사를 켜야 합니다.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    엔진과 세션 팩토리를 묶은 저장소 핸들입니다.
    애플리케이션 시작 시 한 번 생성하여 필요한 곳에 전달하고, 종료 시 dispose()로 정리합니다.
    """

    def __init__(self, url: str = DEFAULT_DATABASE_URL):
        self.url = url
        self.is_in_memory = url in IN_MEMORY_URLS
        engine_kwargs = {}
        if url.startswith("sqlite"):
            # connect_args는 SQLite에서만 필요합니다. (thread-safe 설정)
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if self.is_in_memory:
                # 인메모리 DB는 모든 세션이 하나의 연결을 공유해야 합니다.
                # 스레드 간 동시 사용에는 안전하지 않으므로 테스트 전용입니다.
                engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(url, **engine_kwargs)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        # autocommit=False, autoflush=False로 설정하여, 명시적으로 commit을 호출해야 DB에 반영됩니다.
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def session(self):
        return self.SessionLocal()

    def create_all(self):
        """모델에 정의된 모든 테이블을 생성합니다. (이미 존재하면 생성하지 않음)"""
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self):
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self):
        self.engine.dispose()
