"""
Business directory API URLs.
"""

from django.urls import include, path

from config.routers import SafeDefaultRouter
from .views import (
    ApproveReviewView,
    BusinessCategoryViewSet,
    BusinessViewSet,
    KeepReviewView,
    PendingReviewsView,
    RejectReviewView,
    ReviewHelpfulView,
    ReviewReportView,
)

app_name = 'businesses'

category_router = SafeDefaultRouter()
category_router.register(r'', BusinessCategoryViewSet, basename='business-category')

router = SafeDefaultRouter()
router.register(r'', BusinessViewSet, basename='business')

urlpatterns = [
    path('categories/', include(category_router.urls)),
    path('reviews/<uuid:review_id>/helpful/', ReviewHelpfulView.as_view(), name='review-helpful'),
    path('reviews/<uuid:review_id>/report/', ReviewReportView.as_view(), name='review-report'),
    path('', include(router.urls)),
]

# Mounted at /api/admin/reviews/
moderation_urlpatterns = [
    path('pending/', PendingReviewsView.as_view(), name='review-pending'),
    path('<uuid:review_id>/approve/', ApproveReviewView.as_view(), name='review-approve'),
    path('<uuid:review_id>/reject/', RejectReviewView.as_view(), name='review-reject'),
    path('<uuid:review_id>/keep/', KeepReviewView.as_view(), name='review-keep'),
]
