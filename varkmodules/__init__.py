"""
VARK Modules - Personalized learning module delivery and assessment scoring.

Subpackages:
- schemas: Pydantic models for modules, answers, results and progress
- grading: Answer validation and assessment scoring
- classroom: Progress tracking, navigation, completion and persistence
- viewer: HTML rendering for sections, results and badges
"""

__version__ = "0.1.0"
