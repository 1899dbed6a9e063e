import logging
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, defer
from sqlalchemy.orm.exc import StaleDataError
from user_accounts.database import models
from user_accounts.database.models.user import normalize_username
from user_accounts.repositories.interfaces import IUserRepository
from user_accounts.services.exceptions import ConstraintViolationError, UserNotFoundError

logger = logging.getLogger(__name__)

class SqlalchemyUserRepository(IUserRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, user_model: models.User) -> models.User:
        self.db.add(user_model)
        self._commit(f"User '{user_model.username}' violates a unique constraint.")
        self.db.refresh(user_model)
        return user_model

    def find_by_id(self, user_id: int) -> Optional[models.User]:
        return self.db.query(models.User).filter(models.User.id == user_id).first()

    def find_by_username_case_insensitive(self, username: str) -> Optional[models.User]:
        key = normalize_username(username)
        return self.db.query(models.User).filter(models.User.username_key == key).first()

    def list_all(self) -> List[models.User]:
        return (
            self.db.query(models.User)
            .options(defer(models.User.password_hash))
            .order_by(models.User.username.asc())
            .all()
        )

    def update(self, user: models.User) -> models.User:
        # rollback 이후에는 user 속성이 만료되므로 ID를 미리 읽어 둡니다.
        user_id = user.id
        self.db.add(user)
        try:
            self._commit(f"User '{user.username}' violates a unique constraint.")
        except StaleDataError:
            self.db.rollback()
            logger.warning("User %s vanished before update", user_id)
            raise UserNotFoundError(f"User with id '{user_id}' not found.")
        self.db.refresh(user)
        return user

    def delete(self, user_id: int) -> None:
        user = self.find_by_id(user_id)
        if not user:
            raise UserNotFoundError(f"User with id '{user_id}' not found.")
        self.db.delete(user)
        self._commit(f"User with id '{user_id}' is still referenced.")

    def _commit(self, message: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("Integrity error: %s", e.orig)
            raise ConstraintViolationError(message) from e
