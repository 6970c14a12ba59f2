from rest_framework import serializers
from .models import User, member_id_validator


class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for profile display."""

    memberId = serializers.CharField(source='member_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    lastLogin = serializers.DateTimeField(source='last_login', read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'memberId',
            'name',
            'phone',
            'role',
            'createdAt',
            'lastLogin',
        ]
        read_only_fields = fields


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    memberId = serializers.CharField(required=True, validators=[member_id_validator])
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class RefreshTokenSerializer(serializers.Serializer):
    """Serializer for token refresh."""

    refreshToken = serializers.CharField(required=True)
