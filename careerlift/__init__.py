"""CareerLift AI backend: resume analysis and learning-resource recommendations."""

__version__ = "1.0.0"
