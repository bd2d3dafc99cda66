from typing import List

from pydantic import BaseModel


class QuizQuestion(BaseModel):
    question: str
    options: List[str]
    answer: str
    explanation: str
