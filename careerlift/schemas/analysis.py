"""
Analysis schemas: the JSON schema Gemini must answer with, and the pydantic
models that shape the validated result.
"""
from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


# Gemini structured-output schema (OpenAPI subset, upper-case type names)
ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "resumeScore": {
            "type": "INTEGER",
            "description": "The resume score out of 100, focusing on the career goal.",
        },
        "missingSkills": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "3 crucial skills missing for the target role, grounded in current industry needs.",
        },
        "recommendations": {
            "type": "OBJECT",
            "properties": {
                "certifications": {
                    "type": "ARRAY",
                    "items": {"type": "STRING"},
                    "description": "3 highly relevant certifications or courses (e.g., Coursera, AWS, Google) to bridge the skill gap.",
                },
                "opportunities": {
                    "type": "ARRAY",
                    "items": {"type": "STRING"},
                    "description": "3 real-world opportunities (e.g., hackathons, open-source projects, specialized internships) to gain experience.",
                },
            },
        },
        "summary": {
            "type": "STRING",
            "description": "A concise, 3-sentence summary of the resume's strengths and weaknesses against the career goal.",
        },
    },
    "required": ["resumeScore", "missingSkills", "recommendations", "summary"],
}


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Source(BaseModel):
    """Grounding citation returned by a provider"""
    model_config = ConfigDict(frozen=True)

    uri: str
    title: str


class Recommendations(CamelModel):
    # Plain strings here; the learning-resources path uses structured items instead
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    certifications: Tuple[str, ...] = ()
    opportunities: Tuple[str, ...] = ()


class AnalysisResult(CamelModel):
    """Career-fit report for one (resume, goal) pair"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    resume_score: int
    missing_skills: Tuple[str, ...]
    recommendations: Recommendations
    summary: str
    timestamp: Optional[str] = None
    career_goal: Optional[str] = None
    sources: Tuple[Source, ...] = ()

    @field_validator("resume_score")
    @classmethod
    def clamp_score(cls, v: int) -> int:
        return max(0, min(100, v))

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class AnalyzeRequest(CamelModel):
    # Presence is checked by the orchestrator so that a missing field is a 400
    resume_text: Optional[str] = None
    career_goal: Optional[str] = None


class UploadResumeResponse(CamelModel):
    extracted_text: str
    character_count: int
    analysis: Optional[AnalysisResult] = None
