"""
Serializers for authentication, user profiles, provinces and the audit log.
"""

from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from apps.core.dominican import normalize_dominican_phone, ERROR_MESSAGES
from .models import AuditLog, Profile, Province

User = get_user_model()


class ProvinceSerializer(serializers.ModelSerializer):
    """Serializer for Province model."""

    class Meta:
        model = Province
        fields = ['id', 'name', 'code', 'slug', 'latitude', 'longitude']


class ProfileSerializer(serializers.ModelSerializer):
    """Serializer for Profile model."""

    province = ProvinceSerializer(read_only=True)

    class Meta:
        model = Profile
        fields = [
            'id',
            'role',
            'phone',
            'province',
            'preferences',
            'last_active_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User with nested profile."""

    profile = ProfileSerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'email',
            'first_name',
            'last_name',
            'is_active',
            'date_joined',
            'last_login',
            'profile',
        ]
        read_only_fields = ['id', 'date_joined', 'last_login', 'is_active']


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Token serializer that adds username, email and role claims and
    returns the user alongside the token pair.
    """

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)

        token['username'] = user.username
        token['email'] = user.email
        if hasattr(user, 'profile'):
            token['role'] = 'admin' if user.is_superuser else user.profile.role

        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        data['user'] = UserSerializer(self.user).data
        return data


class UserUpdateSerializer(serializers.ModelSerializer):
    """Serializer for updating user info."""

    class Meta:
        model = User
        fields = ['first_name', 'last_name', 'email']

    def validate_email(self, value):
        if value and User.objects.filter(email__iexact=value).exclude(pk=self.instance.pk).exists():
            raise serializers.ValidationError(ERROR_MESSAGES['duplicate'])
        return value


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Serializer for the fields a user may change on their own profile."""

    province = serializers.SlugRelatedField(
        slug_field='slug',
        queryset=Province.objects.all(),
        required=False,
        allow_null=True,
    )

    class Meta:
        model = Profile
        fields = ['phone', 'province', 'preferences']

    def validate_phone(self, value):
        if not value:
            return ''
        normalized = normalize_dominican_phone(value)
        if normalized is None:
            raise serializers.ValidationError(ERROR_MESSAGES['invalid_phone'])
        return normalized


class AuditLogSerializer(serializers.ModelSerializer):
    """Read-only serializer for audit entries."""

    actor_username = serializers.CharField(
        source='actor.username',
        read_only=True,
        allow_null=True
    )

    class Meta:
        model = AuditLog
        fields = [
            'id',
            'actor',
            'actor_username',
            'action',
            'entity_type',
            'entity_id',
            'changes',
            'ip_address',
            'user_agent',
            'details',
            'success',
            'created_at',
        ]
        read_only_fields = fields
