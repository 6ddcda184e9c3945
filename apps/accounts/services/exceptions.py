"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class EmailAlreadyExistsError(AccountsServiceError):
    """Raised when registering with an email that is already taken."""
    pass


class UserRegistrationError(AccountsServiceError):
    """Raised when user registration fails."""
    pass
