from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User


# =============================================================================
# Input Serializers
# =============================================================================

class UserRegistrationSerializer(serializers.Serializer):
    """Validate input for user registration."""

    email = serializers.EmailField(max_length=255)
    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    password = serializers.CharField(
        write_only=True,
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match'
            })
        return attrs


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class ProfileUpdateSerializer(serializers.Serializer):
    """Validate input for profile updates (all fields optional)."""

    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    photo_url = serializers.URLField(max_length=500, required=False, allow_blank=True)
    notifications_enabled = serializers.BooleanField(required=False)


# =============================================================================
# Output Serializers
# =============================================================================

class UserSerializer(serializers.ModelSerializer):
    """Current user as exposed to clients."""

    uid = serializers.UUIDField(source='id', read_only=True)
    notifications_enabled = serializers.BooleanField(read_only=True)

    class Meta:
        model = User
        fields = [
            'uid',
            'email',
            'display_name',
            'photo_url',
            'notifications_enabled',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields


class UserPublicSerializer(serializers.ModelSerializer):
    """Public user info (for displaying trip members, payers, etc.)."""

    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name']
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_display_name()
