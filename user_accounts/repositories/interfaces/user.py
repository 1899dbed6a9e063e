from abc import ABC, abstractmethod
from typing import List, Optional
from user_accounts.database import models

class IUserRepository(ABC):
    @abstractmethod
    def create(self, user_model: models.User) -> models.User:
        """
        새로운 사용자를 데이터베이스에 생성하고, ID가 할당된 모델을 반환합니다.

        Raises:
            ConstraintViolationError: 사용자 이름의 유일 인덱스가 위반되었을 때.
        """
        pass

    @abstractmethod
    def find_by_id(self, user_id: int) -> Optional[models.User]:
        """고유 ID로 특정 사용자를 조회합니다."""
        pass

    @abstractmethod
    def find_by_username_case_insensitive(self, username: str) -> Optional[models.User]:
        """
        대소문자를 무시하고 이름 전체가 정확히 일치하는 사용자를 조회합니다.
        부분 문자열이나 패턴 일치는 허용하지 않습니다.
        """
        pass

    @abstractmethod
    def list_all(self) -> List[models.User]:
        """모든 사용자의 목록을 조회합니다. (비밀번호 해시 제외)"""
        pass

    @abstractmethod
    def update(self, user: models.User) -> models.User:
        """
        변경된 사용자 정보를 저장합니다.

        Raises:
            UserNotFoundError: 저장 시점에 해당 사용자가 더 이상 존재하지 않을 때.
            ConstraintViolationError: 사용자 이름의 유일 인덱스가 위반되었을 때.
        """
        pass

    @abstractmethod
    def delete(self, user_id: int) -> None:
        """
        특정 사용자를 데이터베이스에서 삭제합니다.

        Raises:
            UserNotFoundError: 해당 ID의 사용자가 없을 때.
            ConstraintViolationError: 다른 레코드가 아직 이 사용자를 참조할 때.
        """
        pass
