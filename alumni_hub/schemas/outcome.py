import enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict


class ErrorKind(str, enum.Enum):
    SELF_REFERENCE = "self_reference"
    ALREADY_EXISTS = "already_exists"
    INVALID_STATE = "invalid_state"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    NOT_REGISTERED = "not_registered"
    ALREADY_REGISTERED = "already_registered"
    DEADLINE_PASSED = "deadline_passed"
    FULL = "full"
    NOT_OPEN = "not_open"


class Outcome(BaseModel):
    """
    Decision returned by the transition engine and the action services.
    Business-rule failures are values of this type, never exceptions.
    """
    allow: bool
    new_state: Optional[str] = None
    error: Optional[ErrorKind] = None
    message: str = ""
    # Set by the action services once the store has been mutated
    record: Optional[Any] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @classmethod
    def ok(cls, new_state: Optional[str] = None, message: str = "", record: Any = None) -> "Outcome":
        return cls(allow=True, new_state=new_state, message=message, record=record)

    @classmethod
    def deny(cls, error: ErrorKind, message: str) -> "Outcome":
        return cls(allow=False, error=error, message=message)

    def with_record(self, record: Any) -> "Outcome":
        return self.model_copy(update={"record": record})
