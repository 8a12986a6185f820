"""
Pydantic schemas for quiz-related requests
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Any, Optional, Union


class CamelModel(BaseModel):
    """Accepts camelCase JSON while exposing snake_case attributes"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class QuizGenerateRequest(CamelModel):
    """Request schema for quiz generation; values are normalized by the service"""
    topic: Optional[str] = None
    difficulty: Optional[str] = None
    number_of_questions: Optional[Any] = None


class CheckAnswersRequest(CamelModel):
    """Answers may be a label, a list of labels or a list of {questionId, answer} objects"""
    quiz_id: Optional[Union[str, int]] = None
    answers: Optional[Any] = None


class HintRequest(CamelModel):
    quiz_id: Optional[Union[str, int]] = None
    question_index: Optional[int] = None
