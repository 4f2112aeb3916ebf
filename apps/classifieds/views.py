"""
Classified API views.

Public listing of active classifieds and the moderation endpoints
under /api/admin/classifieds/.
"""

from decimal import Decimal, InvalidOperation

from django.db.models import Q
from django.utils import timezone
from rest_framework import viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView

from apps.core.exceptions import ValidationError, success_response
from apps.core.permissions import IsModerator
from apps.core.throttling import PublicBurstThrottle, WorkflowThrottle

from .models import Classified, ClassifiedCategory
from .serializers import (
    ClassifiedCategorySerializer,
    ClassifiedModerationSerializer,
    ClassifiedSerializer,
    RejectSerializer,
)
from .services import ClassifiedModerationService


def parse_price(value, field):
    try:
        return Decimal(value)
    except (InvalidOperation, ValueError):
        raise ValidationError("Precio inválido", field=field)


class ClassifiedViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Active classifieds.

    GET /api/classifieds/?category=&province=&min_price=&max_price=&search=
    GET /api/classifieds/{slug}/
    """

    serializer_class = ClassifiedSerializer
    permission_classes = [AllowAny]
    throttle_classes = [PublicBurstThrottle]
    lookup_field = 'slug'

    def get_queryset(self):
        queryset = Classified.objects.filter(
            status=Classified.Status.APPROVED,
        ).filter(
            Q(expires_at__isnull=True) | Q(expires_at__gt=timezone.now())
        ).select_related('category', 'province')

        params = self.request.query_params

        category = params.get('category')
        if category:
            queryset = queryset.filter(category__slug=category)

        province = params.get('province')
        if province:
            queryset = queryset.filter(province__slug=province)

        min_price = params.get('min_price')
        if min_price:
            queryset = queryset.filter(price__gte=parse_price(min_price, 'min_price'))

        max_price = params.get('max_price')
        if max_price:
            queryset = queryset.filter(price__lte=parse_price(max_price, 'max_price'))

        search = params.get('search')
        if search:
            queryset = queryset.filter(
                Q(title__icontains=search) | Q(description__icontains=search)
            )

        return queryset.order_by('-created_at')


class ClassifiedCategoryViewSet(viewsets.ReadOnlyModelViewSet):
    """GET /api/classifieds/categories/"""

    queryset = ClassifiedCategory.objects.all()
    serializer_class = ClassifiedCategorySerializer
    permission_classes = [AllowAny]
    throttle_classes = [PublicBurstThrottle]
    lookup_field = 'slug'
    pagination_class = None


class PendingClassifiedsView(APIView):
    """GET /api/admin/classifieds/pending/?limit=50"""

    permission_classes = [IsAuthenticated, IsModerator]

    def get(self, request):
        try:
            limit = int(request.query_params.get('limit', 50))
        except ValueError:
            raise ValidationError("limit debe ser un número entero", field='limit')

        classifieds = ClassifiedModerationService().get_pending(limit=limit)
        return success_response(data=ClassifiedModerationSerializer(classifieds, many=True).data)


class ApproveClassifiedView(APIView):
    """POST /api/admin/classifieds/{id}/approve/"""

    permission_classes = [IsAuthenticated, IsModerator]
    throttle_classes = [WorkflowThrottle]

    def post(self, request, classified_id):
        classified = ClassifiedModerationService().approve(classified_id, request.user)
        return success_response(
            data=ClassifiedModerationSerializer(classified).data,
            message="Clasificado aprobado",
        )


class RejectClassifiedView(APIView):
    """POST /api/admin/classifieds/{id}/reject/ {reason}"""

    permission_classes = [IsAuthenticated, IsModerator]
    throttle_classes = [WorkflowThrottle]

    def post(self, request, classified_id):
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        classified = ClassifiedModerationService().reject(
            classified_id, request.user, serializer.validated_data['reason']
        )
        return success_response(
            data=ClassifiedModerationSerializer(classified).data,
            message="Clasificado rechazado",
        )
