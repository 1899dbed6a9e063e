# tests/repositories/test_sqlalchemy_user_repository.py
import pytest
from sqlalchemy.orm import Session

from user_accounts.database import models
from user_accounts.repositories.sqlalchemy import SqlalchemyNoteRepository, SqlalchemyUserRepository
from user_accounts.services.exceptions import ConstraintViolationError, UserNotFoundError

# ===================================================================
#  Fixture 설정
# ===================================================================

@pytest.fixture
def user_repo(db_session: Session) -> SqlalchemyUserRepository:
    return SqlalchemyUserRepository(db_session)

@pytest.fixture
def note_repo(db_session: Session) -> SqlalchemyNoteRepository:
    return SqlalchemyNoteRepository(db_session)

def new_user(username: str, roles=None) -> models.User:
    return models.User(username=username, password_hash="hash", roles=roles or ["Employee"])

def add_note(db_session: Session, user_id: int) -> models.Note:
    note = models.Note(user_id=user_id)
    db_session.add(note)
    db_session.commit()
    return note

# ===================================================================
#  생성 및 조회 테스트
# ===================================================================
class TestCreateAndFind:
    def test_create_assigns_id_and_defaults(self, user_repo: SqlalchemyUserRepository):
        """생성 시 ID가 할당되고 active 기본값과 타임스탬프가 채워지는지 테스트합니다."""
        user = user_repo.create(new_user("alice"))

        assert user.id is not None
        assert user.active is True
        assert user.username_key == "alice"
        assert user.created_at is not None
        assert user.updated_at is not None

    @pytest.mark.parametrize("variant", ["alice", "ALICE", "Alice", "aLiCe"])
    def test_find_by_username_case_insensitive(self, user_repo: SqlalchemyUserRepository, variant):
        created = user_repo.create(new_user("Alice"))

        found = user_repo.find_by_username_case_insensitive(variant)

        assert found is not None
        assert found.id == created.id

    @pytest.mark.parametrize("candidate", ["alice", "cooper", "ali", "alicecooper2", "a.*"])
    def test_find_by_username_is_exact_match(self, user_repo: SqlalchemyUserRepository, candidate):
        """부분 문자열이나 패턴 문자로 다른 사용자가 조회되지 않는지 테스트합니다."""
        user_repo.create(new_user("alicecooper"))

        assert user_repo.find_by_username_case_insensitive(candidate) is None

    def test_find_by_username_with_pattern_characters(self, user_repo: SqlalchemyUserRepository):
        user_repo.create(new_user("a.b+c"))

        assert user_repo.find_by_username_case_insensitive("A.B+C") is not None
        assert user_repo.find_by_username_case_insensitive("axb+c") is None

    def test_find_by_id_missing(self, user_repo: SqlalchemyUserRepository):
        assert user_repo.find_by_id(12345) is None

    def test_list_all_sorted_by_username(self, user_repo: SqlalchemyUserRepository):
        user_repo.create(new_user("carol"))
        user_repo.create(new_user("alice"))
        user_repo.create(new_user("bob"))

        assert [u.username for u in user_repo.list_all()] == ["alice", "bob", "carol"]

    def test_create_case_variant_violates_unique_index(self, user_repo: SqlalchemyUserRepository):
        """사전 검사 없이 삽입해도 정규화 유일 인덱스가 중복을 막는지 테스트합니다."""
        user_repo.create(new_user("alice"))

        with pytest.raises(ConstraintViolationError):
            user_repo.create(new_user("ALICE"))

        assert len(user_repo.list_all()) == 1

# ===================================================================
#  수정 테스트
# ===================================================================
class TestUpdate:
    def test_update_persists_fields(self, user_repo: SqlalchemyUserRepository, database):
        user = user_repo.create(new_user("alice"))
        user.username = "Alicia"
        user.roles = ["Employee", "Admin"]
        user.active = False

        user_repo.update(user)

        # 다른 세션에서 다시 조회하여 실제로 저장되었는지 확인
        other = database.session()
        try:
            reloaded = SqlalchemyUserRepository(other).find_by_id(user.id)
            assert reloaded.username == "Alicia"
            assert reloaded.username_key == "alicia"
            assert reloaded.roles == ["Employee", "Admin"]
            assert reloaded.active is False
        finally:
            other.close()

    def test_update_to_taken_name_rolls_back(self, user_repo: SqlalchemyUserRepository):
        user_repo.create(new_user("alice"))
        bob = user_repo.create(new_user("bob"))
        bob.username = "Alice"

        with pytest.raises(ConstraintViolationError):
            user_repo.update(bob)

        assert user_repo.find_by_id(bob.id).username == "bob"

    def test_update_vanished_user(self, user_repo: SqlalchemyUserRepository, database):
        """수정 직전에 다른 세션이 삭제한 사용자는 UserNotFoundError로 보고되는지 테스트합니다."""
        user = user_repo.create(new_user("alice"))
        user_id = user.id
        # 다른 세션에서 먼저 삭제
        other = database.session()
        try:
            SqlalchemyUserRepository(other).delete(user.id)
        finally:
            other.close()

        user.active = False
        with pytest.raises(UserNotFoundError, match=f"User with id '{user_id}' not found"):
            user_repo.update(user)

        # 롤백 이후에도 세션을 계속 사용할 수 있어야 함
        assert user_repo.find_by_id(user_id) is None

# ===================================================================
#  삭제 및 노트 참조 테스트
# ===================================================================
class TestDeleteAndNotes:
    def test_delete_removes_user(self, user_repo: SqlalchemyUserRepository):
        user = user_repo.create(new_user("alice"))

        user_repo.delete(user.id)

        assert user_repo.find_by_id(user.id) is None

    def test_delete_missing_user(self, user_repo: SqlalchemyUserRepository):
        with pytest.raises(UserNotFoundError):
            user_repo.delete(999)

    def test_exists_for_user(self, user_repo: SqlalchemyUserRepository, note_repo: SqlalchemyNoteRepository, db_session: Session):
        alice = user_repo.create(new_user("alice"))
        bob = user_repo.create(new_user("bob"))
        add_note(db_session, alice.id)

        assert note_repo.exists_for_user(alice.id) is True
        assert note_repo.exists_for_user(bob.id) is False

    def test_delete_blocked_by_foreign_key(self, user_repo: SqlalchemyUserRepository, db_session: Session):
        """노트가 참조하는 사용자는 저장소 수준에서도 삭제가 거부되는지 테스트합니다."""
        alice = user_repo.create(new_user("alice"))
        add_note(db_session, alice.id)

        with pytest.raises(ConstraintViolationError):
            user_repo.delete(alice.id)

        assert user_repo.find_by_id(alice.id) is not None
