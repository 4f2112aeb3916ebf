"""
Article serializers.

Public listing/detail serializers plus the editorial workflow payloads
(reviews, comments, versions).
"""

from django.conf import settings
from rest_framework import serializers

from apps.core.serializers import ProvinceSerializer
from .models import Article, ArticleReview, ArticleVersion, Category, EditorialComment


def display_name(user):
    if user is None:
        return ''
    return user.get_full_name() or user.username


# ============================================================================
# Public serializers
# ============================================================================

class CategorySerializer(serializers.ModelSerializer):

    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'description', 'icon', 'color']


class ArticleListSerializer(serializers.ModelSerializer):
    """Compact serializer for article lists."""

    category = CategorySerializer(read_only=True)
    province = ProvinceSerializer(read_only=True)
    author_name = serializers.CharField(read_only=True)

    class Meta:
        model = Article
        fields = [
            'id',
            'title',
            'slug',
            'excerpt',
            'featured_image',
            'is_breaking',
            'is_featured',
            'published_at',
            'category',
            'province',
            'author_name',
            'likes',
            'comments_count',
            'views',
        ]


class ArticleDetailSerializer(ArticleListSerializer):
    """Full public article."""

    class Meta(ArticleListSerializer.Meta):
        fields = ArticleListSerializer.Meta.fields + [
            'content',
            'video_url',
            'images',
            'updated_at',
        ]


# ============================================================================
# Editorial serializers
# ============================================================================

class PendingArticleSerializer(serializers.ModelSerializer):
    """Article in the review queue."""

    author_name = serializers.CharField(read_only=True)
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)

    class Meta:
        model = Article
        fields = [
            'id',
            'title',
            'slug',
            'excerpt',
            'status',
            'submitted_at',
            'scheduled_for',
            'author_name',
            'category_name',
        ]


class ArticleStatusSerializer(serializers.ModelSerializer):
    """Workflow fields returned after a status change."""

    class Meta:
        model = Article
        fields = [
            'id',
            'title',
            'slug',
            'status',
            'published',
            'published_at',
            'submitted_at',
            'approved_at',
            'approved_by',
            'scheduled_for',
        ]
        read_only_fields = fields


class SubmitForReviewSerializer(serializers.Serializer):
    article_id = serializers.UUIDField()


class ReviewDecisionSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=ArticleReview.Decision.choices)
    comments = serializers.CharField(required=False, allow_blank=True, default='')


class ArticleReviewSerializer(serializers.ModelSerializer):
    reviewer_name = serializers.SerializerMethodField()

    class Meta:
        model = ArticleReview
        fields = ['id', 'article', 'reviewer', 'reviewer_name', 'decision', 'comments', 'reviewed_at']
        read_only_fields = fields

    def get_reviewer_name(self, obj):
        return display_name(obj.reviewer)


class EditorialCommentSerializer(serializers.ModelSerializer):
    author_name = serializers.SerializerMethodField()

    class Meta:
        model = EditorialComment
        fields = ['id', 'article', 'author', 'author_name', 'text', 'resolved', 'created_at', 'updated_at']
        read_only_fields = fields

    def get_author_name(self, obj):
        return display_name(obj.author)


class CommentWriteSerializer(serializers.Serializer):
    """
    Comment text and resolved flag.

    Text length is checked again by the service so direct callers get
    the same messages.
    """
    text = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)
    resolved = serializers.BooleanField(required=False)

    def validate_text(self, value):
        max_length = getattr(settings, 'EDITORIAL_COMMENT_MAX_LENGTH', 1000)
        if len(value) > max_length:
            raise serializers.ValidationError(
                f"Comentario muy largo (máximo {max_length} caracteres)"
            )
        return value


class CommentResolveSerializer(serializers.Serializer):
    resolved = serializers.BooleanField(default=False)


class ArticleVersionSerializer(serializers.ModelSerializer):
    author_name = serializers.CharField(read_only=True)

    class Meta:
        model = ArticleVersion
        fields = [
            'id',
            'article',
            'version',
            'title',
            'excerpt',
            'content',
            'changed_by',
            'author_name',
            'changes_summary',
            'created_at',
        ]
        read_only_fields = fields


class VersionSaveSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=300)
    excerpt = serializers.CharField(required=False, allow_blank=True, default='')
    content = serializers.CharField(required=False, allow_blank=True, default='')
    changes_summary = serializers.CharField(required=False, allow_blank=True, max_length=500)


class VersionRestoreSerializer(serializers.Serializer):
    version = serializers.IntegerField(min_value=1)
