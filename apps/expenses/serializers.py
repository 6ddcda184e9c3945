from decimal import Decimal

from rest_framework import serializers

from apps.accounts.serializers import UserPublicSerializer
from apps.trips.categories import get_category
from .models import Expense


# =============================================================================
# Input Serializers
# =============================================================================

class ExpenseFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for expense filtering.

    Query Parameters:
        trip (UUID): Filter by trip ID
        category (str): Filter by category name
        date_from (date): Expenses spent on or after this day
        date_to (date): Expenses spent on or before this day
    """

    trip = serializers.UUIDField(required=False)
    category = serializers.CharField(max_length=50, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        """Validate date range."""
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')

        if date_from and date_to:
            if date_from > date_to:
                raise serializers.ValidationError({
                    'date_to': 'End date must be after start date'
                })

        return attrs


class ExpenseCreateSerializer(serializers.Serializer):
    """Validate input for recording an expense."""

    trip = serializers.UUIDField()
    title = serializers.CharField(max_length=200)
    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.00')
    )
    category = serializers.CharField(max_length=50, required=False, allow_blank=True)
    date = serializers.DateTimeField(required=False, allow_null=True)
    paid_by = serializers.CharField(max_length=100, required=False, allow_blank=True)


class ExpenseUpdateSerializer(serializers.Serializer):
    """Validate input for editing an expense (all fields optional)."""

    title = serializers.CharField(max_length=200, required=False)
    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.00'),
        required=False
    )
    category = serializers.CharField(max_length=50, required=False, allow_blank=True)
    date = serializers.DateTimeField(required=False, allow_null=True)
    paid_by = serializers.CharField(max_length=100, required=False, allow_blank=True)


# =============================================================================
# Output Serializers
# =============================================================================

class ExpenseSerializer(serializers.ModelSerializer):

    created_by = UserPublicSerializer(read_only=True)
    category_style = serializers.SerializerMethodField()

    class Meta:
        model = Expense
        fields = [
            'id',
            'trip',
            'title',
            'category',
            'category_style',
            'amount',
            'date',
            'paid_by',
            'created_by',
            'created_at',
        ]
        read_only_fields = fields

    def get_category_style(self, obj):
        category = get_category(obj.category)
        return {'color': category['color'], 'icon': category['icon']}
