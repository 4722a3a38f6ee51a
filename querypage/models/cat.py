"""Cat and toy models backing the demo list endpoint"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class Cat(Base):
    """A cat; the paginated resource exposed at /api/v1/cats"""

    __tablename__ = "cats"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    color = Column(String(50), nullable=False)
    age = Column(Integer, nullable=True)  # NULL = unknown
    is_indoor = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    toys = relationship("CatToy", back_populates="cat", cascade="all, delete-orphan")


class CatToy(Base):
    """A toy owned by a cat (exercises joined, alias-qualified columns)"""

    __tablename__ = "cat_toys"

    id = Column(Integer, primary_key=True, index=True)
    cat_id = Column(Integer, ForeignKey("cats.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)

    cat = relationship("Cat", back_populates="toys")
