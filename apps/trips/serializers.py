from decimal import Decimal

from rest_framework import serializers

from apps.accounts.models import User
from apps.accounts.serializers import UserPublicSerializer
from apps.analytics.aggregation import TripAggregation
from .models import Trip, TripMember


# =============================================================================
# Input Serializers
# =============================================================================

class TripMemberInputSerializer(serializers.Serializer):
    """A traveller given by name, email or registered user."""

    name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    email = serializers.EmailField(max_length=255, required=False, allow_blank=True)
    user = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True),
        required=False,
        allow_null=True
    )

    def validate(self, attrs):
        if not (attrs.get('name') or attrs.get('email') or attrs.get('user')):
            raise serializers.ValidationError('Provide a name, an email or a user')
        return attrs


class TripInputSerializer(serializers.Serializer):
    """
    Validate trip create / update payloads.

    Used with ``partial=True`` for updates.
    """

    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    start_date = serializers.DateField(required=False, allow_null=True)
    end_date = serializers.DateField(required=False, allow_null=True)
    total_budget = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.00'),
        required=False,
        allow_null=True
    )
    category_budgets = serializers.DictField(
        child=serializers.DecimalField(
            max_digits=12,
            decimal_places=2,
            min_value=Decimal('0.00'),
            allow_null=True
        ),
        required=False
    )
    cover_image = serializers.URLField(max_length=500, required=False, allow_blank=True, default='')
    members = TripMemberInputSerializer(many=True, required=False)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Trip name cannot be blank')
        return value


# =============================================================================
# Output Serializers
# =============================================================================

class TripMemberSerializer(serializers.ModelSerializer):

    user = UserPublicSerializer(read_only=True)
    display_name = serializers.CharField(source='get_display_name', read_only=True)

    class Meta:
        model = TripMember
        fields = ['id', 'user', 'name', 'display_name', 'email', 'is_owner', 'joined_at']
        read_only_fields = fields


class TripSerializer(serializers.ModelSerializer):
    """Full trip detail."""

    owner = UserPublicSerializer(read_only=True)
    members = TripMemberSerializer(many=True, read_only=True)
    member_count = serializers.SerializerMethodField()
    status = serializers.SerializerMethodField()

    class Meta:
        model = Trip
        fields = [
            'id',
            'name',
            'description',
            'start_date',
            'end_date',
            'total_budget',
            'category_budgets',
            'cover_image',
            'owner',
            'members',
            'member_count',
            'status',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_member_count(self, obj):
        return len(obj.members.all())

    def get_status(self, obj):
        return TripAggregation.classify_trip(obj.start_date, obj.end_date).value


class TripListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    member_count = serializers.SerializerMethodField()
    status = serializers.SerializerMethodField()

    class Meta:
        model = Trip
        fields = [
            'id',
            'name',
            'start_date',
            'end_date',
            'total_budget',
            'cover_image',
            'member_count',
            'status',
        ]
        read_only_fields = fields

    def get_member_count(self, obj):
        return len(obj.members.all())

    def get_status(self, obj):
        return TripAggregation.classify_trip(obj.start_date, obj.end_date).value


class CategorySerializer(serializers.Serializer):
    name = serializers.CharField()
    color = serializers.CharField()
    icon = serializers.CharField()
