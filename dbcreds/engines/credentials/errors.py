"""
Failures of one credential issuance.

None of the messages carry statement text or generated credential values.
"""


class IssuanceError(Exception):
    """Base class: the issuance was aborted and nothing was provisioned."""

    pass


class NotFoundError(IssuanceError):
    pass


class RoleNotFoundError(NotFoundError):
    def __init__(self, name: str) -> None:
        super().__init__(f"unknown role: {name}")
        self.name = name


class GenerationError(IssuanceError):
    """The random source failed or produced a value unsafe for raw SQL."""

    pass


class DatabaseConnectionError(IssuanceError, ConnectionError):
    """No usable handle to the target database (caller may retry)."""

    pass


class ExecutionError(IssuanceError):
    """A statement failed; the transaction was rolled back.

    ``position`` is 1-based among the role's statements; ``0`` means the
    catalog selection statement that precedes them.
    """

    def __init__(self, position: int, cause: BaseException) -> None:
        if position == 0:
            where = "catalog selection statement"
        else:
            where = f"statement {position}"
        super().__init__(f"{where} failed: {type(cause).__name__}: {cause}")
        self.position = position


class CommitError(IssuanceError):
    """Commit failed after every statement ran; outcome treated as failed."""

    pass
