# Database models package
from careerlift.models.career_analysis import CareerAnalysis
from careerlift.models.course import Course

__all__ = [
    "CareerAnalysis",
    "Course",
]
