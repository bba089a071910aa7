"""
EcoAudit - Base Model

Base model class and mixins for all SQLAlchemy models.
"""

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column

from ecoaudit.database import Base


class BaseModel(Base):
    """
    Abstract base model with an autoincrement integer primary key.
    All models should inherit from this class.
    """
    
    __abstract__ = True
    
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    
    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"
