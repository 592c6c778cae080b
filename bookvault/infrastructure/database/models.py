"""SQLAlchemy database models."""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Index, Integer, LargeBinary, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class BookModel(Base):
    __tablename__ = "books"
    __table_args__ = (
        Index("ix_books_status", "status"),
        Index("ix_books_created", "created_at"),
        Index("ix_books_title_author_key", "title_key", "author_key"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(512), nullable=False)
    author = Column(String(512), nullable=False, index=True)
    # match_key() of title and author, compared by find_by_title_author
    title_key = Column(String(512), nullable=False, default="", server_default="")
    author_key = Column(String(512), nullable=False, default="", server_default="")
    isbn = Column(String(32), nullable=False, default="", server_default="", index=True)
    description = Column(Text, nullable=False, default="", server_default="")
    genre = Column(String(100), nullable=False, default="", server_default="")
    tags = Column(JSON, nullable=False, default=list)
    cover_url = Column(String(1024), nullable=False, default="", server_default="")
    page_count = Column(Integer, nullable=False, default=0, server_default="0")
    current_page = Column(Integer, nullable=False, default=0, server_default="0")
    rating = Column(Integer, nullable=False, default=0, server_default="0")
    status = Column(String(20), nullable=False, default="want_to_read", server_default="want_to_read")  # want_to_read|reading|read
    notes = Column(Text, nullable=False, default="", server_default="")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    date_read = Column(DateTime, nullable=True)
    embedding = Column(LargeBinary, nullable=True)  # packed float32, see vector_codec
