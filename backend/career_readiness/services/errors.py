class ReadinessInputError(ValueError):
    """Malformed or out-of-range recompute input. Raised before any query."""


class ReadinessAccessError(PermissionError):
    """The authenticated caller is not the user being recomputed."""


class ReadinessUnavailableError(RuntimeError):
    """The store failed mid-recompute.

    State may be partially written. Every write is idempotent (progress and
    readiness by overwrite, unlocks by uniqueness), so re-running the whole
    recompute is safe.
    """

    retryable = True


def ensure_caller_owns(caller_user_id: str | None, user_id: str | None) -> None:
    if not caller_user_id or caller_user_id != user_id:
        raise ReadinessAccessError("Caller may only act on their own readiness")
