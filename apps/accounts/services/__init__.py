"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    EmailAlreadyExistsError,
    UserRegistrationError,
)
from .user_registration import register_user
from .account_management import update_profile

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'EmailAlreadyExistsError',
    'UserRegistrationError',
    # Services
    'register_user',
    'update_profile',
]
