from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from config.database import Base

class Chapter(Base):
    __tablename__ = "chapters"

    id         = Column(Integer, primary_key=True, index=True)
    name       = Column(String(120), nullable=False)
    is_active  = Column(Boolean, nullable=False, default=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    members = relationship("Member", back_populates="chapter")

    def __repr__(self):
        return f"<Chapter(id={self.id}, name='{self.name}')>"


class Member(Base):
    __tablename__ = "members"

    id         = Column(Integer, primary_key=True, index=True)
    name       = Column(String(120), nullable=False)
    chapter_id = Column(Integer, ForeignKey("chapters.id"), nullable=False, index=True)
    is_active  = Column(Boolean, nullable=False, default=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    chapter = relationship(Chapter, back_populates="members")

    def __repr__(self):
        return f"<Member(id={self.id}, chapter_id={self.chapter_id})>"
