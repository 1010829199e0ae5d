from academy.models.user import User, Authority
from academy.models.video import Video
from academy.models.exam import Exam
from academy.models.question import Question
from academy.models.exam_result import ExamResult
from academy.models.user_video_view import UserVideoView
from academy.models.user_education import UserEducation
from academy.models.guest_application import GuestApplication, Gender

__all__ = [
    "User", "Authority", "Video", "Exam", "Question", "ExamResult",
    "UserVideoView", "UserEducation", "GuestApplication", "Gender",
]
