"""
Article API views.

Public news endpoints (published articles only) and the editorial
endpoints under /api/admin/ for review, comments and version history.
"""

import logging

from django.db.models import F, Q
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.exceptions import ValidationError, created_response, success_response
from apps.core.permissions import IsAdmin, IsAuthor, IsEditor
from apps.core.throttling import (
    CommentThrottle,
    DestructiveActionThrottle,
    PublicBurstThrottle,
    WorkflowThrottle,
)

from .models import Article, Category
from .serializers import (
    ArticleDetailSerializer,
    ArticleListSerializer,
    ArticleReviewSerializer,
    ArticleStatusSerializer,
    ArticleVersionSerializer,
    CategorySerializer,
    CommentResolveSerializer,
    CommentWriteSerializer,
    EditorialCommentSerializer,
    PendingArticleSerializer,
    ReviewDecisionSerializer,
    SubmitForReviewSerializer,
    VersionRestoreSerializer,
    VersionSaveSerializer,
)
from .services import ArticleReviewService, VersionControl

logger = logging.getLogger(__name__)

ORDERING_FIELDS = {'published_at', '-published_at', 'views', '-views', 'likes', '-likes'}


# ============================================================================
# Public API
# ============================================================================

class ArticleViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Published news articles.

    GET  /api/articles/                 - List published articles
    GET  /api/articles/featured/        - Featured articles
    GET  /api/articles/breaking/        - Breaking news
    GET  /api/articles/{slug}/          - Article detail (counts a view)
    GET  /api/articles/{slug}/related/  - Articles from the same category
    POST /api/articles/{slug}/like/     - Like an article
    """

    permission_classes = [AllowAny]
    throttle_classes = [PublicBurstThrottle]
    lookup_field = 'slug'

    def get_queryset(self):
        queryset = Article.objects.filter(
            published=True,
            status=Article.Status.PUBLISHED,
        ).select_related('author', 'category', 'province')

        params = self.request.query_params

        category = params.get('category')
        if category:
            queryset = queryset.filter(category__slug=category)

        province = params.get('province')
        if province:
            queryset = queryset.filter(province__slug=province)

        search = params.get('search')
        if search:
            queryset = queryset.filter(
                Q(title__icontains=search) |
                Q(excerpt__icontains=search) |
                Q(content__icontains=search)
            )

        for flag in ('is_breaking', 'is_featured'):
            value = params.get(flag)
            if value is not None:
                queryset = queryset.filter(**{flag: value.lower() in ('true', '1', 'yes')})

        ordering = params.get('ordering')
        if ordering in ORDERING_FIELDS:
            queryset = queryset.order_by(ordering, '-created_at')
        else:
            queryset = queryset.order_by('-published_at', '-created_at')

        return queryset

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return ArticleDetailSerializer
        return ArticleListSerializer

    def retrieve(self, request, *args, **kwargs):
        article = self.get_object()
        Article.objects.filter(pk=article.pk).update(views=F('views') + 1)
        article.views += 1
        return Response(self.get_serializer(article).data)

    @action(detail=False, methods=['get'])
    def featured(self, request):
        articles = self.get_queryset().filter(is_featured=True)[:10]
        return Response(ArticleListSerializer(articles, many=True).data)

    @action(detail=False, methods=['get'])
    def breaking(self, request):
        articles = self.get_queryset().filter(is_breaking=True)[:10]
        return Response(ArticleListSerializer(articles, many=True).data)

    @action(detail=True, methods=['get'])
    def related(self, request, slug=None):
        article = self.get_object()
        if not article.category_id:
            return Response([])
        articles = (
            self.get_queryset()
            .filter(category_id=article.category_id)
            .exclude(pk=article.pk)[:4]
        )
        return Response(ArticleListSerializer(articles, many=True).data)

    @action(detail=True, methods=['post'])
    def like(self, request, slug=None):
        article = self.get_object()
        Article.objects.filter(pk=article.pk).update(likes=F('likes') + 1)
        article.refresh_from_db(fields=['likes'])
        return success_response(data={'likes': article.likes})


class CategoryViewSet(viewsets.ReadOnlyModelViewSet):
    """
    News categories.

    GET /api/articles/categories/
    GET /api/articles/categories/{slug}/
    """

    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    permission_classes = [AllowAny]
    throttle_classes = [PublicBurstThrottle]
    lookup_field = 'slug'
    pagination_class = None


# ============================================================================
# Editorial review
# ============================================================================

class SubmitForReviewView(APIView):
    """POST /api/admin/article-review/submit/ {article_id}"""

    permission_classes = [IsAuthenticated, IsAuthor]
    throttle_classes = [WorkflowThrottle]

    def post(self, request):
        serializer = SubmitForReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        article = ArticleReviewService().submit_for_review(
            serializer.validated_data['article_id'], request.user
        )
        return success_response(
            data=ArticleStatusSerializer(article).data,
            message="Artículo enviado para revisión",
        )


class PendingReviewsView(APIView):
    """GET /api/admin/article-review/pending/?limit=20"""

    permission_classes = [IsAuthenticated, IsEditor]

    def get(self, request):
        limit = request.query_params.get('limit')
        if limit is not None:
            try:
                limit = int(limit)
            except ValueError:
                raise ValidationError("limit debe ser un número entero", field='limit')

        articles = ArticleReviewService().get_pending_reviews(limit=limit)
        return success_response(data=PendingArticleSerializer(articles, many=True).data)


class WorkflowStatsView(APIView):
    """GET /api/admin/article-review/stats/"""

    permission_classes = [IsAuthenticated, IsAuthor]

    def get(self, request):
        return success_response(data=ArticleReviewService().get_workflow_stats())


class ReviewArticleView(APIView):
    """POST /api/admin/article-review/{id}/review/ {decision, comments}"""

    permission_classes = [IsAuthenticated, IsEditor]
    throttle_classes = [WorkflowThrottle]

    def post(self, request, article_id):
        serializer = ReviewDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = ArticleReviewService().review_article(
            article_id,
            request.user,
            serializer.validated_data['decision'],
            serializer.validated_data.get('comments', ''),
        )
        return created_response(
            data={
                'review': ArticleReviewSerializer(review).data,
                'article': ArticleStatusSerializer(review.article).data,
            },
            message="Revisión registrada",
        )


class ReviewHistoryView(APIView):
    """GET /api/admin/article-review/{id}/history/"""

    permission_classes = [IsAuthenticated, IsAuthor]

    def get(self, request, article_id):
        reviews = ArticleReviewService().get_article_reviews(article_id)
        return success_response(data=ArticleReviewSerializer(reviews, many=True).data)


class PublishArticleView(APIView):
    """POST /api/admin/article-review/{id}/publish/"""

    permission_classes = [IsAuthenticated, IsEditor]
    throttle_classes = [WorkflowThrottle]

    def post(self, request, article_id):
        article = ArticleReviewService().publish_article(article_id, request.user)
        return success_response(
            data=ArticleStatusSerializer(article).data,
            message="Artículo publicado",
        )


# ============================================================================
# Editorial comments
# ============================================================================

class ArticleCommentsView(APIView):
    """
    GET  /api/admin/comments/article/{id}/  - Comments, newest first
    POST /api/admin/comments/article/{id}/  - Add a comment {text}
    """

    permission_classes = [IsAuthenticated, IsAuthor]

    def get_throttles(self):
        if self.request.method == 'POST':
            return [CommentThrottle()]
        return super().get_throttles()

    def get(self, request, article_id):
        comments = ArticleReviewService().get_comments(article_id)
        return success_response(data=EditorialCommentSerializer(comments, many=True).data)

    def post(self, request, article_id):
        serializer = CommentWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        comment = ArticleReviewService().add_comment(
            article_id, request.user, serializer.validated_data.get('text', '')
        )
        return created_response(
            data=EditorialCommentSerializer(comment).data,
            message="Comentario agregado",
        )


class CommentStatsView(APIView):
    """GET /api/admin/comments/article/{id}/stats/"""

    permission_classes = [IsAuthenticated, IsAuthor]

    def get(self, request, article_id):
        return success_response(data=ArticleReviewService().get_comment_stats(article_id))


class CommentDetailView(APIView):
    """
    PUT    /api/admin/comments/{comment_id}/  - Edit text and/or resolved
    DELETE /api/admin/comments/{comment_id}/  - Delete
    """

    permission_classes = [IsAuthenticated, IsAuthor]

    def get_throttles(self):
        if self.request.method == 'DELETE':
            return [DestructiveActionThrottle()]
        return [CommentThrottle()]

    def put(self, request, comment_id):
        serializer = CommentWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        comment = ArticleReviewService().update_comment(
            comment_id,
            request.user,
            text=serializer.validated_data.get('text'),
            resolved=serializer.validated_data.get('resolved'),
        )
        return success_response(
            data=EditorialCommentSerializer(comment).data,
            message="Comentario actualizado",
        )

    def delete(self, request, comment_id):
        ArticleReviewService().delete_comment(comment_id, request.user)
        return success_response(message="Comentario eliminado")


class CommentResolveView(APIView):
    """PATCH /api/admin/comments/{comment_id}/resolve/ {resolved}"""

    permission_classes = [IsAuthenticated, IsAuthor]
    throttle_classes = [CommentThrottle]

    def patch(self, request, comment_id):
        serializer = CommentResolveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        resolved = serializer.validated_data['resolved']
        comment = ArticleReviewService().set_comment_resolved(comment_id, request.user, resolved)
        return success_response(
            data=EditorialCommentSerializer(comment).data,
            message="Comentario resuelto" if resolved else "Comentario reabierto",
        )


# ============================================================================
# Version history
# ============================================================================

class VersionListView(APIView):
    """
    GET  /api/admin/versions/{article_id}/  - Versions, newest first
    POST /api/admin/versions/{article_id}/  - Save a snapshot
    """

    permission_classes = [IsAuthenticated, IsAuthor]

    def get(self, request, article_id):
        versions = VersionControl().get_versions(article_id)
        return success_response(data=ArticleVersionSerializer(versions, many=True).data)

    def post(self, request, article_id):
        serializer = VersionSaveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        version = VersionControl().save_version(
            article_id,
            request.user,
            title=data['title'],
            excerpt=data.get('excerpt', ''),
            content=data.get('content', ''),
            changes_summary=data.get('changes_summary') or None,
        )
        return created_response(
            data=ArticleVersionSerializer(version).data,
            message="Versión guardada",
        )


class VersionDetailView(APIView):
    """GET /api/admin/versions/{article_id}/{version}/"""

    permission_classes = [IsAuthenticated, IsAuthor]

    def get(self, request, article_id, version):
        found = VersionControl().get_version(article_id, version)
        return success_response(data=ArticleVersionSerializer(found).data)


class VersionRestoreView(APIView):
    """POST /api/admin/versions/{article_id}/restore/ {version}"""

    permission_classes = [IsAuthenticated, IsAuthor]
    throttle_classes = [WorkflowThrottle]

    def post(self, request, article_id):
        serializer = VersionRestoreSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        number = serializer.validated_data['version']
        restored = VersionControl().restore_version(article_id, number, request.user)
        return success_response(
            data=ArticleVersionSerializer(restored).data,
            message=f"Artículo restaurado a la versión {number}",
        )


class VersionCompareView(APIView):
    """GET /api/admin/versions/{article_id}/compare/{v1}/{v2}/"""

    permission_classes = [IsAuthenticated, IsAuthor]

    def get(self, request, article_id, v1, v2):
        comparison = VersionControl().compare_versions(article_id, v1, v2)
        return success_response(data={
            'version1': ArticleVersionSerializer(comparison['version1']).data,
            'version2': ArticleVersionSerializer(comparison['version2']).data,
            'changes': comparison['changes'],
        })


class VersionStatsView(APIView):
    """GET /api/admin/versions/{article_id}/stats/"""

    permission_classes = [IsAuthenticated, IsAuthor]

    def get(self, request, article_id):
        stats = VersionControl().get_version_stats(article_id)
        for key in ('first_version', 'last_version'):
            if stats[key] is not None:
                stats[key] = stats[key].isoformat()
        return success_response(data=stats)


class VersionCleanupView(APIView):
    """DELETE /api/admin/versions/{article_id}/cleanup/?keep=10"""

    permission_classes = [IsAuthenticated, IsAdmin]
    throttle_classes = [DestructiveActionThrottle]

    def delete(self, request, article_id):
        keep = request.query_params.get('keep', '10')
        try:
            keep = int(keep)
        except ValueError:
            raise ValidationError("keep debe ser un número entero", field='keep')

        deleted = VersionControl().cleanup_old_versions(article_id, keep_last=keep)
        return success_response(
            data={'deleted': deleted, 'keep_last': keep},
            message=f"{deleted} versiones eliminadas",
        )
