# engagement/models/user.py
from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
import enum
from .base import Base

class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"

class User(Base):
    """Пользователь. Владелец строки - сервис авторизации, здесь только чтение."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=True)
    mobile = Column(String, unique=True, index=True, nullable=True)
    role = Column(String, default="user")
    profile_image = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    score = relationship("UserScore", back_populates="user", uselist=False)
    badges = relationship("UserBadge", back_populates="user")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
