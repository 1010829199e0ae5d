from sqlalchemy import Column, Integer, Text, ForeignKey
from sqlalchemy.orm import relationship

from academy.db.base import Base


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    question_text = Column(Text, nullable=False)
    answer_text = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)

    exam = relationship("Exam", back_populates="questions")
