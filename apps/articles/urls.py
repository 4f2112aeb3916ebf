"""
Article API URLs.

Public news routes are mounted at /api/articles/; the editorial
patterns below are mounted under /api/admin/ in config/urls.py.
"""

from django.urls import include, path

from config.routers import SafeDefaultRouter
from .views import (
    ArticleCommentsView,
    ArticleViewSet,
    CategoryViewSet,
    CommentDetailView,
    CommentResolveView,
    CommentStatsView,
    PendingReviewsView,
    PublishArticleView,
    ReviewArticleView,
    ReviewHistoryView,
    SubmitForReviewView,
    VersionCleanupView,
    VersionCompareView,
    VersionDetailView,
    VersionListView,
    VersionRestoreView,
    VersionStatsView,
    WorkflowStatsView,
)

app_name = 'articles'

category_router = SafeDefaultRouter()
category_router.register(r'', CategoryViewSet, basename='category')

router = SafeDefaultRouter()
router.register(r'', ArticleViewSet, basename='article')

urlpatterns = [
    # Categories (before the router so "categories" is not read as a slug)
    path('categories/', include(category_router.urls)),

    path('', include(router.urls)),
]

# Mounted at /api/admin/article-review/
review_urlpatterns = [
    path('submit/', SubmitForReviewView.as_view(), name='review-submit'),
    path('pending/', PendingReviewsView.as_view(), name='review-pending'),
    path('stats/', WorkflowStatsView.as_view(), name='review-stats'),
    path('<uuid:article_id>/review/', ReviewArticleView.as_view(), name='review-article'),
    path('<uuid:article_id>/history/', ReviewHistoryView.as_view(), name='review-history'),
    path('<uuid:article_id>/publish/', PublishArticleView.as_view(), name='review-publish'),
]

# Mounted at /api/admin/comments/
comment_urlpatterns = [
    path('article/<uuid:article_id>/', ArticleCommentsView.as_view(), name='article-comments'),
    path('article/<uuid:article_id>/stats/', CommentStatsView.as_view(), name='article-comment-stats'),
    path('<uuid:comment_id>/', CommentDetailView.as_view(), name='comment-detail'),
    path('<uuid:comment_id>/resolve/', CommentResolveView.as_view(), name='comment-resolve'),
]

# Mounted at /api/admin/versions/
version_urlpatterns = [
    path('<uuid:article_id>/', VersionListView.as_view(), name='version-list'),
    path('<uuid:article_id>/stats/', VersionStatsView.as_view(), name='version-stats'),
    path('<uuid:article_id>/restore/', VersionRestoreView.as_view(), name='version-restore'),
    path('<uuid:article_id>/cleanup/', VersionCleanupView.as_view(), name='version-cleanup'),
    path(
        '<uuid:article_id>/compare/<int:v1>/<int:v2>/',
        VersionCompareView.as_view(),
        name='version-compare',
    ),
    path('<uuid:article_id>/<int:version>/', VersionDetailView.as_view(), name='version-detail'),
]
