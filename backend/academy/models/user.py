import enum
from sqlalchemy import Integer, Text, Index, func, text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy.db.base import Base


class Authority(str, enum.Enum):
    admin = "admin"
    user = "user"

    @classmethod
    def normalize(cls, value) -> "Authority":
        return cls.admin if str(value or "").strip().lower() == "admin" else cls.user


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(Text, nullable=False)
    work_area: Mapped[str | None] = mapped_column(Text, nullable=True)
    authority: Mapped[str] = mapped_column(Text, nullable=False, default=Authority.user.value)
    username: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    password_plain: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(ARRAY(Text), nullable=True)
    school: Mapped[str | None] = mapped_column(Text, nullable=True)
    department: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Mirrors user_video_views; only written by membership_service
    watched_videos: Mapped[list[int]] = mapped_column(
        ARRAY(Integer), nullable=False, default=list, server_default=text("'{}'::INTEGER[]")
    )

    video_views = relationship("UserVideoView", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    education = relationship("UserEducation", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)


Index("users_email_lower_idx", func.lower(User.email))
