"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ConfigMissingError(DomainException):
    """User has no financial configuration; onboarding must be completed first"""

    def __init__(self, user_id: str):
        super().__init__(f"Financial config not found for user {user_id}. Complete onboarding first.")
        self.user_id = user_id


class DataUnavailableError(DomainException):
    """Ledger or config store could not be read"""

    pass


class InvalidTransactionDataError(DomainException):
    """Transaction data is malformed or invalid"""

    pass


class InvalidFinancialConfigError(DomainException):
    """Financial configuration violates its invariants"""

    pass
