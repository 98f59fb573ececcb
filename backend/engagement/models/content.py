# engagement/models/content.py
# Контент принадлежит CMS; движку нужен только id и тип, чтобы классифицировать карточку
from sqlalchemy import Column, String, Boolean, Text
from .base import Base

class Post(Base):
    __tablename__ = "posts"

    id = Column(String(64), primary_key=True)
    title = Column(String, nullable=False)
    post_type = Column(String(32), nullable=False, index=True)  # CURRENT_AFFAIRS, GENERAL_KNOWLEDGE, ...
    is_active = Column(Boolean, default=True)

class McqQuestion(Base):
    __tablename__ = "mcq_questions"

    id = Column(String(64), primary_key=True)
    question = Column(Text, nullable=False)
