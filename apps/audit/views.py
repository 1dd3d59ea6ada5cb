from rest_framework.exceptions import ValidationError
from rest_framework.generics import ListAPIView
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole

from .events import EntityType
from .models import AuditLog
from .serializers import AuditLogFilterSerializer, AuditLogSerializer


class AuditLogPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "size"
    max_page_size = 200


def _int_param(request, name: str, default: int, minimum: int = 1, maximum: int = 1000) -> int:
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError({name: "Must be an integer."})
    if value < minimum or value > maximum:
        raise ValidationError({name: f"Must be between {minimum} and {maximum}."})
    return value


def _entity_type(value: str) -> str:
    value = value.upper()
    if value not in EntityType.values:
        raise ValidationError({"entity_type": f"Unknown entity type: {value}."})
    return value


class AuditLogListAPIView(ListAPIView):
    permission_classes = [IsAuthenticated, IsAdminRole]
    serializer_class = AuditLogSerializer
    pagination_class = AuditLogPagination

    def get_queryset(self):
        filters = AuditLogFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        return filters.filter_queryset(AuditLog.objects.all())


class EntityTimelineAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, entity_type, entity_id):
        limit = _int_param(request, "limit", 50)
        qs = AuditLog.objects.for_entity(_entity_type(entity_type), entity_id)[:limit]
        return Response(AuditLogSerializer(qs, many=True).data)


class UserActivityAPIView(ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AuditLogSerializer
    pagination_class = AuditLogPagination

    def get_queryset(self):
        return AuditLog.objects.for_actor(self.kwargs["actor_id"])


class RecentActivityAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        hours = _int_param(request, "hours", 24, maximum=24 * 365)
        limit = _int_param(request, "limit", 100)
        qs = AuditLog.objects.since(hours)[:limit]
        return Response(AuditLogSerializer(qs, many=True).data)


class EntityActivityCountAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, entity_type, entity_id):
        count = AuditLog.objects.for_entity(_entity_type(entity_type), entity_id).count()
        return Response({"count": count})


class UserActivityCountAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, actor_id):
        return Response({"count": AuditLog.objects.for_actor(actor_id).count()})
