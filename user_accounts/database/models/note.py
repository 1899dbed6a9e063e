from sqlalchemy import Column, ForeignKey, Integer
from ..database import Base

class Note(Base):
    """
    사용자에게 할당된 노트입니다.
    이 서비스에서는 사용자 삭제 전 참조 여부를 확인하는 용도로만 사용하므로, 참조 컬럼만 정의합니다.
    """
    __tablename__ = "notes"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
