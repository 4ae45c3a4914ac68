"""Service result types with bilingual messages."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Message:
    """User-facing message in English and Arabic."""

    en: str
    ar: str

    def format(self, **values: object) -> "Message":
        """Return a copy with placeholders filled in both languages."""
        return Message(en=self.en.format(**values), ar=self.ar.format(**values))


class ErrorKind(StrEnum):
    """Failure categories returned by services."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    BUSINESS_RULE = "business_rule"
    SYSTEM = "system"


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful service outcome."""

    data: T
    message: Message | None = None

    @property
    def ok(self) -> bool:
        return True

    def to_payload(self) -> dict[str, object]:
        """Return the uniform response shape."""
        payload: dict[str, object] = {"status": True, "data": self.data}
        if self.message is not None:
            payload["message"] = self.message
        return payload


@dataclass(frozen=True)
class Failure:
    """Failed service outcome."""

    kind: ErrorKind
    message: Message

    @property
    def ok(self) -> bool:
        return False

    def to_payload(self) -> dict[str, object]:
        """Return the uniform response shape."""
        return {"status": False, "kind": self.kind, "message": self.message}


Result = Ok[T] | Failure


SOMETHING_WENT_WRONG = Message(en="Something went wrong.", ar="حدث خطأ ما")


def system_failure(message: Message = SOMETHING_WENT_WRONG) -> Failure:
    """Return the generic failure used for unexpected errors."""
    return Failure(ErrorKind.SYSTEM, message)
