"""Account management service."""

from typing import Optional

from django.db import transaction
from django.contrib.auth import get_user_model

User = get_user_model()


@transaction.atomic
def update_profile(
    *,
    user: User,
    display_name: Optional[str] = None,
    photo_url: Optional[str] = None,
    notifications_enabled: Optional[bool] = None
) -> User:
    """
    Update the profile fields a traveller can edit.

    ``notifications_enabled`` lives in the preferences JSON so the tracker can
    consult it without a schema change.
    """
    update_fields = []

    if display_name is not None:
        user.display_name = display_name
        update_fields.append('display_name')

    if photo_url is not None:
        user.photo_url = photo_url
        update_fields.append('photo_url')

    if notifications_enabled is not None:
        preferences = dict(user.preferences or {})
        preferences['notifications_enabled'] = notifications_enabled
        user.preferences = preferences
        update_fields.append('preferences')

    if update_fields:
        user.save(update_fields=update_fields)

    return user
