from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class Trip(models.Model):
    """A planned journey with a date range, a budget and travelling members."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='owned_trips'
    )

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)

    # Calendar range; start <= end is validated on write, tolerated on read
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)

    # Budget
    total_budget = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    category_budgets = models.JSONField(default=dict, blank=True)

    # Hosted image URL (upload happens client side)
    cover_image = models.URLField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'trips'
        indexes = [
            models.Index(fields=['owner', 'start_date'], name='trips_owner_start_idx'),
        ]
        ordering = ['start_date', '-created_at']

    def __str__(self):
        return self.name

    def has_member(self, user):
        return self.owner_id == user.id or self.members.filter(user=user).exists()

    def is_owner(self, user):
        return self.owner_id == user.id


class TripMember(models.Model):
    """
    A traveller on a trip.

    Members may be registered users or just a name/email typed in by the
    owner. Exactly one member per trip is expected to be the owner.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    trip = models.ForeignKey(Trip, on_delete=models.CASCADE, related_name='members')
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='trip_memberships'
    )
    name = models.CharField(max_length=100, blank=True)
    email = models.EmailField(max_length=255, blank=True)
    is_owner = models.BooleanField(default=False)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'trip_members'
        indexes = [
            models.Index(fields=['trip', 'is_owner'], name='trip_members_owner_idx'),
        ]
        ordering = ['-is_owner', 'joined_at']

    def __str__(self):
        return f"{self.get_display_name()} on {self.trip.name}"

    def get_display_name(self):
        if self.name:
            return self.name
        if self.user_id:
            return self.user.get_display_name()
        return self.email.split('@')[0] if self.email else 'Traveller'
