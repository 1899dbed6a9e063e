from .database import Base, Database, DEFAULT_DATABASE_URL
from . import models
