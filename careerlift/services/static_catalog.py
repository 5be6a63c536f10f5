"""
Bundled recommendation catalog.

Served by GET /api/recommendations/details and used as the last fallback of
the learning-resources path.
"""
from typing import Dict, List

from careerlift.schemas.learning import LearningCourse, LearningOpportunity

RECOMMENDATIONS_DB: Dict[str, List[dict]] = {
    "certifications": [
        {
            "name": "Google Data Analytics Professional Certificate",
            "provider": "Google / Coursera",
            "link": "https://www.coursera.org/professional-certificates/google-data-analytics",
            "cost": "Subscription (~$49/month)",
            "length": "6 months at 10 hrs/week",
        },
        {
            "name": "AWS Certified Cloud Practitioner",
            "provider": "Amazon Web Services",
            "link": "https://aws.amazon.com/certification/certified-cloud-practitioner/",
            "cost": "$100 exam",
            "length": "4-6 weeks",
        },
        {
            "name": "Machine Learning Specialization",
            "provider": "DeepLearning.AI / Coursera",
            "link": "https://www.coursera.org/specializations/machine-learning-introduction",
            "cost": "Subscription (~$49/month)",
            "length": "3 months",
        },
        {
            "name": "Google Cybersecurity Professional Certificate",
            "provider": "Google / Coursera",
            "link": "https://www.coursera.org/professional-certificates/google-cybersecurity",
            "cost": "Subscription (~$49/month)",
            "length": "6 months",
        },
        {
            "name": "CS50's Introduction to Computer Science",
            "provider": "Harvard / edX",
            "link": "https://www.edx.org/learn/computer-science/harvard-university-cs50-s-introduction-to-computer-science",
            "cost": "Free (certificate optional)",
            "length": "12 weeks",
        },
    ],
    "opportunities": [
        {
            "name": "Kaggle Competitions",
            "description": "Practice data science on real datasets and compare against a public leaderboard.",
            "link": "https://www.kaggle.com/competitions",
            "difficulty": "Beginner to Advanced",
        },
        {
            "name": "Major League Hacking (MLH) Hackathons",
            "description": "Weekend student hackathons, online and in person, with sponsor mentorship.",
            "link": "https://mlh.io/seasons/2025/events",
            "difficulty": "Beginner",
        },
        {
            "name": "Hack The Box Labs",
            "description": "Hands-on penetration testing labs and capture-the-flag challenges.",
            "link": "https://www.hackthebox.com/",
            "difficulty": "Intermediate",
        },
        {
            "name": "Google Summer of Code",
            "description": "Paid, mentored contributions to open-source organizations.",
            "link": "https://summerofcode.withgoogle.com/",
            "difficulty": "Intermediate",
        },
    ],
}


def static_courses() -> List[LearningCourse]:
    return [
        LearningCourse(
            title=c["name"],
            provider=c.get("provider") or "Static Catalog",
            link=c.get("link"),
            cost=c.get("cost"),
            duration=c.get("length"),
            level="",
        )
        for c in RECOMMENDATIONS_DB.get("certifications", [])
    ]


def static_opportunities() -> List[LearningOpportunity]:
    return [
        LearningOpportunity(
            name=o["name"],
            description=o.get("description"),
            link=o.get("link"),
            difficulty=o.get("difficulty"),
        )
        for o in RECOMMENDATIONS_DB.get("opportunities", [])
    ]
