"""
Business directory serializers.
"""

from rest_framework import serializers

from apps.core.serializers import ProvinceSerializer
from .models import Business, BusinessCategory, Review


class BusinessCategorySerializer(serializers.ModelSerializer):

    class Meta:
        model = BusinessCategory
        fields = ['id', 'name', 'slug', 'icon', 'description']


class BusinessSerializer(serializers.ModelSerializer):
    category = BusinessCategorySerializer(read_only=True)
    province = ProvinceSerializer(read_only=True)

    class Meta:
        model = Business
        fields = [
            'id',
            'name',
            'slug',
            'description',
            'category',
            'province',
            'address',
            'phone',
            'whatsapp',
            'email',
            'website',
            'facebook',
            'instagram',
            'images',
            'rating',
            'review_count',
            'price_range',
            'hours',
            'verified',
            'featured',
        ]


class ReviewSerializer(serializers.ModelSerializer):
    """Public review; the reviewer's email is never exposed."""

    class Meta:
        model = Review
        fields = [
            'id',
            'user_name',
            'rating',
            'title',
            'comment',
            'helpful_count',
            'created_at',
        ]


class ReviewModerationSerializer(serializers.ModelSerializer):
    business_name = serializers.CharField(source='business.name', read_only=True)
    business_slug = serializers.CharField(source='business.slug', read_only=True)

    class Meta:
        model = Review
        fields = [
            'id',
            'business_name',
            'business_slug',
            'user_name',
            'user_email',
            'rating',
            'title',
            'comment',
            'status',
            'helpful_count',
            'reported',
            'moderated_at',
            'created_at',
        ]


class ReviewSubmitSerializer(serializers.Serializer):
    rating = serializers.IntegerField(
        min_value=1,
        max_value=5,
        error_messages={
            'min_value': 'La calificación debe estar entre 1 y 5',
            'max_value': 'La calificación debe estar entre 1 y 5',
        },
    )
    title = serializers.CharField(required=False, allow_blank=True, default='', max_length=200)
    comment = serializers.CharField(required=False, allow_blank=True, default='', max_length=5000)


class ReviewReportSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='', max_length=500)


class ReviewRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='', max_length=1000)
