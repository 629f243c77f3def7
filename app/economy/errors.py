class EconomyError(Exception):
    """Base for every error the wallet and rental core reports to its callers."""

    code = "E_ECONOMY"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ValidationError(EconomyError):
    code = "E_VALIDATION"


class NotFoundError(EconomyError):
    code = "E_NOT_FOUND"


class PlanNotFoundError(NotFoundError):
    def __init__(self, message: str = "Plan not found") -> None:
        super().__init__(message)


class UserNotFoundError(NotFoundError):
    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message)


class QuotaExceededError(EconomyError):
    code = "E_PLAN_LIMIT_REACHED"

    def __init__(self, message: str = "Plan limit reached. Please rent a higher plan.") -> None:
        super().__init__(message)


class TransientStorageError(EconomyError):
    code = "E_STORAGE_UNAVAILABLE"

    def __init__(self, message: str = "Storage is temporarily unavailable") -> None:
        super().__init__(message)
