# teach/schemas.py

from typing import List, Literal, Optional
from pydantic import BaseModel, Field, StrictStr, field_validator

CEFRLevel = Literal["A1", "A2", "B1", "B2", "C1", "C2"]
CEFR_LEVELS: List[str] = ["A1", "A2", "B1", "B2", "C1", "C2"]

ChangeType = Literal["spelling", "grammar", "vocabulary", "conjugation"]
CHANGE_TYPES = ("spelling", "grammar", "vocabulary", "conjugation")


# ───────── corrections ─────────
class EditSpan(BaseModel):
    start: int
    end: int
    original: str = ""
    corrected: str = ""
    explanation: str = ""
    type: Optional[ChangeType] = None

class ChangeHint(BaseModel):
    original: Optional[str] = None
    corrected: Optional[str] = None
    explanation: Optional[str] = None
    type: Optional[ChangeType] = None

    @field_validator("type", mode="before")
    @classmethod
    def _known_type_or_none(cls, v):
        # an unknown category must not cost us the explanation
        if isinstance(v, str) and v.strip().lower() in CHANGE_TYPES:
            return v.strip().lower()
        return None

class TextSegment(BaseModel):
    text: str
    hasError: bool
    changeIndex: Optional[int] = None

class CorrectRequest(BaseModel):
    text: str = Field(min_length=1, max_length=5000)

class CorrectionResponse(BaseModel):
    hasErrors: bool
    correctedText: Optional[str] = None
    changes: Optional[List[EditSpan]] = None


# ───────── emoji game ─────────
class GameQuestion(BaseModel):
    emoji: StrictStr = Field(min_length=1)
    correctAnswer: StrictStr = Field(min_length=1)
    wrongAnswers: List[StrictStr] = Field(min_length=2, max_length=2)

class GameQuestionRequest(BaseModel):
    level: Optional[CEFRLevel] = None
    previousWords: Optional[List[str]] = None


# ───────── chat ─────────
class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str

class ChatStreamRequest(BaseModel):
    messages: List[ChatMessage] = Field(min_length=1)
    targetLevel: CEFRLevel = "B1"
