import bcrypt

# bcrypt 비용 인자(2^rounds 회 반복). 기본값은 10입니다.
DEFAULT_HASH_ROUNDS = 10

# bcrypt는 입력의 앞 72바이트만 사용합니다.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = DEFAULT_HASH_ROUNDS) -> str:
    """
    비밀번호를 bcrypt로 해시합니다. 호출할 때마다 새로운 salt를 사용합니다.

    Args:
        password: 평문 비밀번호.
        rounds: bcrypt 비용 인자 (4~31).

    Returns:
        salt와 비용 인자가 포함된 bcrypt 해시 문자열.
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """평문 비밀번호가 저장된 bcrypt 해시와 일치하는지 확인합니다."""
    return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))


def exceeds_max_length(password: str) -> bool:
    return len(password.encode('utf-8')) > MAX_PASSWORD_BYTES
