from sqlalchemy.orm import Session
from user_accounts.database import models
from user_accounts.repositories.interfaces import INoteRepository

class SqlalchemyNoteRepository(INoteRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def exists_for_user(self, user_id: int) -> bool:
        return self.db.query(models.Note.id).filter(models.Note.user_id == user_id).first() is not None
