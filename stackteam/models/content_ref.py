"""
Reference to a votable/commentable piece of content.

Comments and votes point at either a question or an answer. In code the pair
travels as a single ``ContentRef`` value; in the database it is stored as a
constrained kind column plus the id.
"""
from dataclasses import dataclass
from enum import Enum

from sqlalchemy import Enum as SAEnum


class ContentKind(str, Enum):
    QUESTION = "question"
    ANSWER = "answer"


def content_kind_column_type() -> SAEnum:
    return SAEnum(
        ContentKind,
        native_enum=False,
        length=20,
        values_callable=lambda kinds: [k.value for k in kinds],
    )


@dataclass(frozen=True)
class ContentRef:
    kind: ContentKind
    id: int

    @classmethod
    def question(cls, id: int) -> "ContentRef":
        return cls(ContentKind.QUESTION, id)

    @classmethod
    def answer(cls, id: int) -> "ContentRef":
        return cls(ContentKind.ANSWER, id)

    @property
    def is_question(self) -> bool:
        return self.kind is ContentKind.QUESTION
