from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, LargeBinary, Index, func
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship, deferred

from academy.db.base import Base


class Video(Base):
    __tablename__ = "videos"
    __table_args__ = (
        Index("videos_created_at_idx", "created_at", postgresql_ops={"created_at": "DESC"}),
        Index("videos_tags_gin", "tags", postgresql_using="gin"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    uploader: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(ARRAY(Text), nullable=True)
    filename: Mapped[str | None] = mapped_column(Text, nullable=True)
    mime_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    size_bytes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # Never loaded with the row; read through video_repo windowed/whole reads
    content: Mapped[bytes | None] = deferred(mapped_column(LargeBinary, nullable=True))
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    exam = relationship("Exam", back_populates="video", uselist=False, cascade="all, delete-orphan", passive_deletes=True)
