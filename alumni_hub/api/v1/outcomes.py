from typing import Dict, Optional

from fastapi import HTTPException, status

from alumni_hub.schemas.outcome import ErrorKind, Outcome

DEFAULT_STATUS_CODES: Dict[ErrorKind, int] = {
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def status_code_for(error: ErrorKind, overrides: Optional[Dict[ErrorKind, int]] = None) -> int:
    """Every rule violation without an explicit mapping is a 422."""
    if overrides and error in overrides:
        return overrides[error]
    return DEFAULT_STATUS_CODES.get(error, status.HTTP_422_UNPROCESSABLE_ENTITY)


def raise_for_outcome(outcome: Outcome, overrides: Optional[Dict[ErrorKind, int]] = None) -> Outcome:
    """
    Raises the HTTPException matching a denied outcome, with the engine's message
    as the detail. Allowed outcomes are returned unchanged.
    """
    if outcome.allow:
        return outcome
    raise HTTPException(status_code=status_code_for(outcome.error, overrides), detail=outcome.message)
