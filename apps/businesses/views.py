"""
Business directory API views.

Public directory and reviews, reader feedback on reviews, and the
review moderation endpoints under /api/admin/reviews/.
"""

from decimal import Decimal, InvalidOperation

from django.db.models import Q
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView

from apps.core.exceptions import ValidationError, created_response, success_response
from apps.core.permissions import IsModerator
from apps.core.throttling import PublicBurstThrottle, ReviewSubmitThrottle, WorkflowThrottle

from .models import Business, BusinessCategory
from .serializers import (
    BusinessCategorySerializer,
    BusinessSerializer,
    ReviewModerationSerializer,
    ReviewRejectSerializer,
    ReviewReportSerializer,
    ReviewSerializer,
    ReviewSubmitSerializer,
)
from .services import ReviewModerationService, ReviewService


class BusinessViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Business directory.

    GET      /api/businesses/?category=&province=&verified=&min_rating=&search=
    GET      /api/businesses/{slug}/
    GET/POST /api/businesses/{slug}/reviews/
    """

    serializer_class = BusinessSerializer
    permission_classes = [AllowAny]
    throttle_classes = [PublicBurstThrottle]
    lookup_field = 'slug'

    def get_queryset(self):
        queryset = Business.objects.filter(is_active=True).select_related('category', 'province')
        params = self.request.query_params

        category = params.get('category')
        if category:
            queryset = queryset.filter(category__slug=category)

        province = params.get('province')
        if province:
            queryset = queryset.filter(province__slug=province)

        verified = params.get('verified')
        if verified is not None:
            queryset = queryset.filter(verified=verified.lower() in ('true', '1', 'yes'))

        min_rating = params.get('min_rating')
        if min_rating:
            try:
                queryset = queryset.filter(rating__gte=Decimal(min_rating))
            except (InvalidOperation, ValueError):
                raise ValidationError("Calificación mínima inválida", field='min_rating')

        search = params.get('search')
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) |
                Q(description__icontains=search) |
                Q(address__icontains=search)
            )

        return queryset

    def get_permissions(self):
        if self.action == 'reviews' and self.request.method == 'POST':
            return [IsAuthenticated()]
        return super().get_permissions()

    def get_throttles(self):
        if self.action == 'reviews' and self.request.method == 'POST':
            return [ReviewSubmitThrottle()]
        return super().get_throttles()

    @action(detail=True, methods=['get', 'post'])
    def reviews(self, request, slug=None):
        service = ReviewService()

        if request.method == 'POST':
            serializer = ReviewSubmitSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            review = service.submit_review(slug, request.user, **serializer.validated_data)
            return created_response(
                data=ReviewSerializer(review).data,
                message="Reseña enviada. Será publicada después de ser revisada.",
            )

        queryset = service.get_approved_reviews(slug)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(ReviewSerializer(page, many=True).data)
        return success_response(data=ReviewSerializer(queryset, many=True).data)


class BusinessCategoryViewSet(viewsets.ReadOnlyModelViewSet):
    """GET /api/businesses/categories/"""

    queryset = BusinessCategory.objects.all()
    serializer_class = BusinessCategorySerializer
    permission_classes = [AllowAny]
    throttle_classes = [PublicBurstThrottle]
    lookup_field = 'slug'
    pagination_class = None


class ReviewHelpfulView(APIView):
    """POST /api/businesses/reviews/{id}/helpful/"""

    permission_classes = [AllowAny]
    throttle_classes = [PublicBurstThrottle]

    def post(self, request, review_id):
        helpful_count = ReviewService().mark_helpful(review_id)
        return success_response(data={'helpful_count': helpful_count})


class ReviewReportView(APIView):
    """POST /api/businesses/reviews/{id}/report/ {reason}"""

    permission_classes = [AllowAny]
    throttle_classes = [PublicBurstThrottle]

    def post(self, request, review_id):
        serializer = ReviewReportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ReviewService().report(review_id, request.user, serializer.validated_data['reason'])
        return success_response(message="Reseña reportada. Gracias por tu ayuda.")


class PendingReviewsView(APIView):
    """GET /api/admin/reviews/pending/?limit=50&reported=true"""

    permission_classes = [IsAuthenticated, IsModerator]

    def get(self, request):
        try:
            limit = int(request.query_params.get('limit', 50))
        except ValueError:
            raise ValidationError("limit debe ser un número entero", field='limit')
        reported = request.query_params.get('reported', '').lower() in ('true', '1', 'yes')

        reviews = ReviewModerationService().get_pending(limit=limit, reported=reported)
        return success_response(data=ReviewModerationSerializer(reviews, many=True).data)


class ApproveReviewView(APIView):
    """POST /api/admin/reviews/{id}/approve/"""

    permission_classes = [IsAuthenticated, IsModerator]
    throttle_classes = [WorkflowThrottle]

    def post(self, request, review_id):
        review = ReviewModerationService().approve(review_id, request.user)
        return success_response(
            data=ReviewModerationSerializer(review).data,
            message="Reseña aprobada",
        )


class RejectReviewView(APIView):
    """POST /api/admin/reviews/{id}/reject/ {reason}"""

    permission_classes = [IsAuthenticated, IsModerator]
    throttle_classes = [WorkflowThrottle]

    def post(self, request, review_id):
        serializer = ReviewRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = ReviewModerationService().reject(
            review_id, request.user, serializer.validated_data['reason']
        )
        return success_response(
            data=ReviewModerationSerializer(review).data,
            message="Reseña rechazada",
        )


class KeepReviewView(APIView):
    """POST /api/admin/reviews/{id}/keep/ {reason} - dismiss reports, keep the review"""

    permission_classes = [IsAuthenticated, IsModerator]
    throttle_classes = [WorkflowThrottle]

    def post(self, request, review_id):
        serializer = ReviewRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = ReviewModerationService().keep(
            review_id, request.user, serializer.validated_data['reason']
        )
        return success_response(
            data=ReviewModerationSerializer(review).data,
            message="Reportes descartados",
        )
