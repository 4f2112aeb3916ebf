"""
URL configuration for the SafraReport project.
"""

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

from apps.core.urls import auth_urlpatterns, audit_urlpatterns, province_urlpatterns
from apps.articles.urls import comment_urlpatterns, review_urlpatterns, version_urlpatterns
from apps.classifieds.urls import moderation_urlpatterns as classified_moderation_urlpatterns
from apps.businesses.urls import moderation_urlpatterns as review_moderation_urlpatterns

admin_api_urlpatterns = [
    path('article-review/', include((review_urlpatterns, 'article-review'))),
    path('comments/', include((comment_urlpatterns, 'comments'))),
    path('versions/', include((version_urlpatterns, 'versions'))),
    path('classifieds/', include((classified_moderation_urlpatterns, 'classified-moderation'))),
    path('reviews/', include((review_moderation_urlpatterns, 'review-moderation'))),
    path('audit-logs/', include((audit_urlpatterns, 'audit-logs'))),
]

urlpatterns = [
    path('admin/', admin.site.urls),
    # Auth endpoints
    path('api/auth/', include((auth_urlpatterns, 'auth'))),
    # Public API
    path('api/provinces/', include((province_urlpatterns, 'provinces'))),
    path('api/articles/', include('apps.articles.urls')),
    path('api/classifieds/', include('apps.classifieds.urls')),
    path('api/businesses/', include('apps.businesses.urls')),
    # Editorial and moderation API
    path('api/admin/', include(admin_api_urlpatterns)),
    # Observability endpoints
    path('', include('apps.core.urls')),
]

# Serve media files in development
if settings.DEBUG:
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)

# Customize admin site
admin.site.site_header = "SafraReport Administración"
admin.site.site_title = "SafraReport Admin"
admin.site.index_title = "Panel editorial"
