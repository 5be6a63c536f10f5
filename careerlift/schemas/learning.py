"""Learning-resource schemas (courses and hands-on opportunities)."""
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from careerlift.schemas.analysis import Source


LEARNING_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "courses": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "title": {"type": "STRING"},
                    "provider": {"type": "STRING"},
                    "link": {"type": "STRING"},
                    "cost": {"type": "STRING"},
                    "duration": {"type": "STRING"},
                    "level": {"type": "STRING"},
                },
                "required": ["title", "provider", "link"],
            },
        },
        "opportunities": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "description": {"type": "STRING"},
                    "link": {"type": "STRING"},
                    "difficulty": {"type": "STRING"},
                },
                "required": ["name", "link"],
            },
        },
    },
    "required": ["courses", "opportunities"],
}


class LearningCourse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str
    provider: str = ""
    link: Optional[str] = None
    cost: Optional[str] = None
    duration: Optional[str] = None
    level: Optional[str] = None


class LearningOpportunity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    description: Optional[str] = None
    link: Optional[str] = None
    difficulty: Optional[str] = None


class ExternalCoursesRequest(BaseModel):
    role: Optional[str] = None
    skills: Union[List[str], str, None] = None


class LearningResourceSet(BaseModel):
    """Response body of POST /api/courses/external"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    role: Optional[str] = None
    skills: str = ""
    courses: List[LearningCourse] = Field(default_factory=list)
    opportunities: List[LearningOpportunity] = Field(default_factory=list)
    sources: List[Source] = Field(default_factory=list)
    used_vertex: bool = False
    fallback: bool = False
    message: Optional[str] = None

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
