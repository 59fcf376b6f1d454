from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base
import enum


class MessageType(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=False)
    profile_picture = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    connections = relationship("Connection", back_populates="owner", foreign_keys="[Connection.owner_id]")


class Connection(Base):
    __tablename__ = 'connections'
    __table_args__ = (UniqueConstraint("owner_id", "connection_id"),)

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    connection_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    owner = relationship("User", foreign_keys=[owner_id], back_populates="connections")
    connection = relationship("User", foreign_keys=[connection_id])


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    from_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    to_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    text = Column(Text, nullable=False, default="")
    media_url = Column(String, nullable=True)
    message_type = Column(String, nullable=False, default=MessageType.TEXT.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Relationships
    sender = relationship("User", foreign_keys=[from_user_id])
    recipient = relationship("User", foreign_keys=[to_user_id])
