# user_accounts/services/exceptions.py

# --- Validation Exceptions ---
class UserValidationError(ValueError):
    """요청 값이 누락되었거나 형식이 잘못되었을 때"""
    pass

# --- Lookup Exceptions ---
class UserNotFoundError(Exception):
    """사용자를 찾을 수 없을 때"""
    pass

class NoUsersFoundError(Exception):
    """조회할 사용자가 한 명도 없을 때"""
    pass

# --- Conflict Exceptions ---
class DuplicateUsernameError(Exception):
    """대소문자를 무시했을 때 같은 이름의 다른 사용자가 이미 존재할 때"""
    pass

class UserHasNotesError(Exception):
    """노트가 할당된 사용자를 삭제하려고 할 때"""
    pass

class ConstraintViolationError(Exception):
    """저장소의 유일성/외래 키 제약 조건이 위반되었을 때"""
    pass

# --- Creation Exceptions ---
class UserCreationError(Exception):
    """사용자 생성 결과 레코드가 만들어지지 않았을 때"""
    pass
