from .sqlalchemy_user_repository import SqlalchemyUserRepository
from .sqlalchemy_note_repository import SqlalchemyNoteRepository
