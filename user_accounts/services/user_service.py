import logging
from typing import Any, Dict, List, Optional, Sequence

from user_accounts.database import models
from user_accounts.repositories.interfaces import INoteRepository, IUserRepository
from user_accounts.services.exceptions import (
    ConstraintViolationError, DuplicateUsernameError, NoUsersFoundError,
    UserCreationError, UserHasNotesError, UserNotFoundError, UserValidationError
)
from user_accounts.utils.password_hasher import (
    DEFAULT_HASH_ROUNDS, MAX_PASSWORD_BYTES, exceeds_max_length, hash_password
)

logger = logging.getLogger(__name__)

ALL_FIELDS_REQUIRED = "All fields are required"
USER_ID_REQUIRED = "User ID required"
PASSWORD_TOO_LONG = f"Password must be at most {MAX_PASSWORD_BYTES} bytes"

# 64비트 정수 기본 키의 범위
MIN_USER_ID = 1
MAX_USER_ID = 2 ** 63 - 1


class UserService:
    """사용자 계정의 조회, 생성, 수정, 삭제와 관련된 모든 검증을 담당하는 서비스입니다."""

    def __init__(self, user_repo: IUserRepository, note_repo: INoteRepository, hash_rounds: int = DEFAULT_HASH_ROUNDS):
        """
        UserService를 초기화합니다.

        Args:
            user_repo: 사용자 데이터에 접근하기 위한 리포지토리.
            note_repo: 사용자 삭제 전 노트 참조 여부를 확인하기 위한 리포지토리.
            hash_rounds: 비밀번호 해시에 사용할 bcrypt 비용 인자.
        """
        self.user_repo = user_repo
        self.note_repo = note_repo
        self.hash_rounds = hash_rounds

    def list_users(self) -> List[Dict[str, Any]]:
        """
        모든 사용자의 목록을 조회합니다. (비밀번호 제외)

        Raises:
            NoUsersFoundError: 등록된 사용자가 한 명도 없을 때.
        """
        users = self.user_repo.list_all()
        if not users:
            raise NoUsersFoundError("No users found")
        return [_to_dict(u) for u in users]

    def create_user(self, username: str, password: str, roles: Sequence[str]) -> Dict[str, Any]:
        """
        새로운 사용자를 생성합니다. 비밀번호는 bcrypt로 해시하여 저장하고, 활성 상태로 시작합니다.

        Raises:
            UserValidationError: 필수 값이 누락되었거나 형식이 잘못되었을 때.
            DuplicateUsernameError: 대소문자를 무시하고 같은 이름의 사용자가 이미 존재할 때.
            UserCreationError: 저장소가 레코드를 만들지 못했을 때.
        """
        if not (_is_filled_str(username) and _is_filled_str(password) and _is_valid_roles(roles)):
            raise UserValidationError(ALL_FIELDS_REQUIRED)
        if exceeds_max_length(password):
            raise UserValidationError(PASSWORD_TOO_LONG)

        if self.user_repo.find_by_username_case_insensitive(username):
            logger.warning("Rejected duplicate username '%s' on create", username)
            raise DuplicateUsernameError("Duplicate username")

        password_hash = hash_password(password, self.hash_rounds)
        new_user = models.User(username=username, password_hash=password_hash, roles=list(roles), active=True)
        try:
            created_user = self.user_repo.create(new_user)
        except ConstraintViolationError as e:
            # 사전 검사와 삽입 사이에 같은 이름이 먼저 저장된 경우
            raise DuplicateUsernameError("Duplicate username") from e
        if not created_user:
            raise UserCreationError("Invalid user data received")

        logger.info("Created user '%s' (id=%s)", created_user.username, created_user.id)
        return {
            "message": f"New user {username} created",
            "id": created_user.id,
            "username": created_user.username,
        }

    def update_user(self, user_id: Any, username: str, roles: Sequence[str], active: bool, password: Optional[str] = None) -> Dict[str, Any]:
        """
        사용자 정보를 수정합니다. username, roles, active는 항상 전체 교체되며,
        password가 주어진 경우에만 비밀번호 해시를 새로 계산합니다.

        Raises:
            UserValidationError: 필수 값이 누락되었거나 active가 bool이 아닐 때.
            UserNotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
            DuplicateUsernameError: 다른 사용자가 같은 이름(대소문자 무시)을 사용 중일 때.
        """
        user_id = _parse_id(user_id)
        if (
            user_id is None
            or not _is_filled_str(username)
            or not _is_valid_roles(roles)
            or not isinstance(active, bool)
            or (password is not None and not isinstance(password, str))
        ):
            raise UserValidationError(ALL_FIELDS_REQUIRED)
        if password and exceeds_max_length(password):
            raise UserValidationError(PASSWORD_TOO_LONG)

        user = self.user_repo.find_by_id(user_id)
        if not user:
            raise UserNotFoundError("User not found")

        duplicate = self.user_repo.find_by_username_case_insensitive(username)
        if duplicate and duplicate.id != user_id:
            logger.warning("Rejected duplicate username '%s' on update of user %s", username, user_id)
            raise DuplicateUsernameError("Duplicate username")

        user.username = username
        user.roles = list(roles)
        user.active = active
        if password:
            user.password_hash = hash_password(password, self.hash_rounds)

        try:
            updated_user = self.user_repo.update(user)
        except ConstraintViolationError as e:
            raise DuplicateUsernameError("Duplicate username") from e

        logger.info("Updated user %s", user_id)
        return {
            "message": f"{updated_user.username} updated",
            "id": updated_user.id,
            "username": updated_user.username,
        }

    def delete_user(self, user_id: Any) -> Dict[str, Any]:
        """
        사용자를 삭제합니다. 단, 할당된 노트가 없는 사용자만 삭제 가능합니다.
        노트 참조 검사가 존재 여부 검사보다 먼저 수행됩니다.

        Raises:
            UserValidationError: ID가 누락되었을 때.
            UserHasNotesError: 사용자를 참조하는 노트가 존재할 때.
            UserNotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
        """
        user_id = _parse_id(user_id)
        if user_id is None:
            raise UserValidationError(USER_ID_REQUIRED)

        if self.note_repo.exists_for_user(user_id):
            logger.warning("Refused to delete user %s: notes assigned", user_id)
            raise UserHasNotesError("User has assigned notes")

        if not self.user_repo.find_by_id(user_id):
            raise UserNotFoundError("User not found")

        try:
            self.user_repo.delete(user_id)
        except ConstraintViolationError as e:
            # 검사 이후 노트가 추가되어 외래 키가 삭제를 막은 경우
            raise UserHasNotesError("User has assigned notes") from e

        logger.info("Deleted user %s", user_id)
        return {"message": f"User with ID {user_id} deleted", "id": user_id}


def _is_filled_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _is_valid_roles(roles: Any) -> bool:
    return (
        isinstance(roles, (list, tuple))
        and len(roles) > 0
        and all(_is_filled_str(role) for role in roles)
    )


def _parse_id(value: Any) -> Optional[int]:
    """
    정수 또는 숫자 문자열 ID를 int로 변환합니다.
    형식이 맞지 않거나 저장소의 64비트 INTEGER 범위를 벗어나면 None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.strip().isdecimal():
        parsed = int(value.strip())
    else:
        return None
    if not MIN_USER_ID <= parsed <= MAX_USER_ID:
        return None
    return parsed


def _to_dict(user: models.User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "roles": list(user.roles or []),
        "active": user.active,
        "created_at": user.created_at.isoformat() if user.created_at else None,
        "updated_at": user.updated_at.isoformat() if user.updated_at else None,
    }
