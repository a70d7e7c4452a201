from typing import Union

from fastapi import HTTPException

from career_readiness.services.errors import (
    ReadinessAccessError,
    ReadinessInputError,
    ReadinessUnavailableError,
)


READINESS_ERRORS = (ReadinessAccessError, ReadinessInputError, ReadinessUnavailableError)


def to_http_error(
    exc: Union[ReadinessAccessError, ReadinessInputError, ReadinessUnavailableError],
) -> HTTPException:
    if isinstance(exc, ReadinessAccessError):
        return HTTPException(status_code=403, detail="Forbidden")
    if isinstance(exc, ReadinessInputError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, ReadinessUnavailableError):
        # Clients must not render a 0 score for this; it is not a real drop.
        return HTTPException(
            status_code=503,
            detail={
                "message": "Readiness temporarily unavailable, try again",
                "retryable": True,
            },
        )
    return HTTPException(status_code=500, detail="Readiness request failed")
