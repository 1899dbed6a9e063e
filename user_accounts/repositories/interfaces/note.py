from abc import ABC, abstractmethod

class INoteRepository(ABC):
    @abstractmethod
    def exists_for_user(self, user_id: int) -> bool:
        """특정 사용자를 참조하는 노트가 하나라도 있는지 확인합니다."""
        pass
