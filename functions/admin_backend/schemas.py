"""
Pydantic schemas for the admin backend.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from admin_backend.errors import DocumentParseError

Record = dict[str, Any]


class Document(BaseModel):
    """
    The whole persisted dataset, mirroring data/index.json:
      { "people": [...], "questions": [...], "items": [...] }
    Records are open-ended JSON objects carrying at least an "id".
    """

    people: list[Record] = Field(default_factory=list)
    questions: list[Record] = Field(default_factory=list)
    items: list[Record] = Field(default_factory=list)

    @classmethod
    def from_json(cls, raw: str) -> "Document":
        try:
            doc = json.loads(raw)
        except ValueError as exc:
            raise DocumentParseError(f"invalid document json: {exc}") from exc
        if not isinstance(doc, dict):
            raise DocumentParseError("document root must be an object")
        try:
            return cls.model_validate(doc)
        except ValueError as exc:
            raise DocumentParseError(str(exc)) from exc

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json"))


def load_baseline(path: Path) -> Document:
    """Read the seed dataset used when no remote state exists."""
    return Document.from_json(path.read_text(encoding="utf-8"))


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    token: str


class MessageResponse(BaseModel):
    msg: str = "success"


class CreatedResponse(BaseModel):
    id: str


class SignUrlResponse(BaseModel):
    url: str


QuestionImageVariant = Literal["default", "correct"]
