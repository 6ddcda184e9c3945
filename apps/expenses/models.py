from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid


class Expense(models.Model):
    """A single spend recorded against a trip."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    trip = models.ForeignKey(
        'trips.Trip',
        on_delete=models.CASCADE,
        related_name='expenses'
    )

    title = models.CharField(max_length=200)
    category = models.CharField(max_length=50, default='Other')
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    # When the money was spent; drives daily grouping
    date = models.DateTimeField(default=timezone.now, null=True, blank=True)

    # Member name or free text, defaults to the person entering it
    paid_by = models.CharField(max_length=100, default='You')

    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'expenses'
        indexes = [
            models.Index(fields=['trip', '-created_at'], name='expenses_trip_created_idx'),
            models.Index(fields=['trip', 'category'], name='expenses_trip_category_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} ({self.amount})"
