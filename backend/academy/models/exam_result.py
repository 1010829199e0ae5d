from sqlalchemy import Column, Integer, Text, Numeric, DateTime, ForeignKey, Index, func

from academy.db.base import Base


class ExamResult(Base):
    __tablename__ = "exam_results"

    id = Column(Integer, primary_key=True)
    # Free-text participant name, not a foreign key; compared with lower()
    user_label = Column("user", Text, nullable=False)
    video_id = Column(Integer, ForeignKey("videos.id", ondelete="CASCADE"), nullable=True, index=True)
    exam_title = Column(Text, nullable=True)
    score = Column(Numeric, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


Index("exam_results_user_lower_idx", func.lower(ExamResult.user_label))
