from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String, func
from sqlalchemy.orm import validates
from ..database import Base

DEFAULT_ROLE = "Employee"


class User(Base):
    """
    서비스에 등록된 사용자 계정을 나타냅니다.
    비밀번호는 해시로만 저장되며, 역할(roles)은 의미를 해석하지 않는 문자열 라벨 목록입니다.
    username_key는 대소문자를 무시한 중복 검사를 위한 정규화 컬럼으로, 유일성의 최종 기준입니다.
    """
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False)
    username_key = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    roles = Column(JSON, nullable=False, default=lambda: [DEFAULT_ROLE])
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @validates("username")
    def _sync_username_key(self, key, username):
        self.username_key = normalize_username(username)
        return username


def normalize_username(username: str) -> str:
    return username.casefold()
