"""
Classified API URLs.
"""

from django.urls import include, path

from config.routers import SafeDefaultRouter
from .views import (
    ApproveClassifiedView,
    ClassifiedCategoryViewSet,
    ClassifiedViewSet,
    PendingClassifiedsView,
    RejectClassifiedView,
)

app_name = 'classifieds'

category_router = SafeDefaultRouter()
category_router.register(r'', ClassifiedCategoryViewSet, basename='classified-category')

router = SafeDefaultRouter()
router.register(r'', ClassifiedViewSet, basename='classified')

urlpatterns = [
    path('categories/', include(category_router.urls)),
    path('', include(router.urls)),
]

# Mounted at /api/admin/classifieds/
moderation_urlpatterns = [
    path('pending/', PendingClassifiedsView.as_view(), name='classified-pending'),
    path('<uuid:classified_id>/approve/', ApproveClassifiedView.as_view(), name='classified-approve'),
    path('<uuid:classified_id>/reject/', RejectClassifiedView.as_view(), name='classified-reject'),
]
