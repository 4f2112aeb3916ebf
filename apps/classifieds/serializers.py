"""
Classified serializers.
"""

from rest_framework import serializers

from apps.core.serializers import ProvinceSerializer
from .models import Classified, ClassifiedCategory


class ClassifiedCategorySerializer(serializers.ModelSerializer):

    class Meta:
        model = ClassifiedCategory
        fields = ['id', 'name', 'slug', 'icon', 'description']


class ClassifiedSerializer(serializers.ModelSerializer):
    """Public classified listing."""

    category = ClassifiedCategorySerializer(read_only=True)
    province = ProvinceSerializer(read_only=True)
    price_display = serializers.CharField(read_only=True)

    class Meta:
        model = Classified
        fields = [
            'id',
            'title',
            'slug',
            'description',
            'price',
            'currency',
            'price_display',
            'negotiable',
            'category',
            'province',
            'contact_name',
            'contact_phone',
            'contact_whatsapp',
            'contact_email',
            'condition',
            'delivery_available',
            'images',
            'expires_at',
            'created_at',
        ]


class ClassifiedModerationSerializer(ClassifiedSerializer):
    """Classified as seen by moderators."""

    owner = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta(ClassifiedSerializer.Meta):
        fields = ClassifiedSerializer.Meta.fields + [
            'status',
            'owner',
            'moderated_at',
            'rejection_reason',
        ]


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='', max_length=1000)
