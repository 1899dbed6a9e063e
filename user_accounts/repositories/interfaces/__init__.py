from .user import IUserRepository
from .note import INoteRepository
