"""User registration service."""

import logging

from django.db import transaction, IntegrityError
from django.contrib.auth import get_user_model

from .exceptions import EmailAlreadyExistsError, UserRegistrationError

User = get_user_model()
logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    display_name: str = ""
) -> User:
    """
    Register a new traveller account.

    Args:
        email: User's email address
        password: User's password (will be hashed)
        display_name: Optional display name

    Returns:
        Created User instance

    Raises:
        EmailAlreadyExistsError: If the email is already registered
        UserRegistrationError: If the account could not be stored
    """
    normalized = User.objects.normalize_email(email)
    if User.objects.filter(email__iexact=normalized).exists():
        raise EmailAlreadyExistsError(f"An account with email {normalized} already exists")

    try:
        user = User.objects.create_user(
            email=normalized,
            password=password,
            display_name=display_name
        )
    except IntegrityError as e:
        logger.exception("Registration failed for %s", normalized)
        raise UserRegistrationError(f"Registration failed: {str(e)}")

    logger.info("Registered user %s", user.id)
    return user
