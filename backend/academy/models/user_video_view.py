from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship

from academy.db.base import Base


class UserVideoView(Base):
    __tablename__ = "user_video_views"
    __table_args__ = (UniqueConstraint("user_id", "video_id", name="user_video_views_user_id_video_id_key"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(Integer, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)
    watched_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="video_views")
    video = relationship("Video")
