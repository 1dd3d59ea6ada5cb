from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.audit import AuditContext

from .models import SubscriptionPlan
from .serializers import SubscriptionCreateSerializer, SubscriptionPlanSerializer
from .services import SubscriptionService


class SubscriptionPlanListAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        plans = SubscriptionPlan.objects.filter(is_active=True)
        return Response(SubscriptionPlanSerializer(plans, many=True).data)


class SubscriptionListCreateAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(SubscriptionService.list_user_subscriptions(request.user))

    def post(self, request):
        serializer = SubscriptionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        subscription = SubscriptionService.create_subscription(
            serializer.validated_data,
            user=request.user,
            context=AuditContext.from_request(request),
        )
        return Response(subscription, status=status.HTTP_201_CREATED)


class SubscriptionActiveAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        subscription = SubscriptionService.get_active_subscription(request.user)
        if subscription is None:
            return Response({"detail": "No active subscription."}, status=status.HTTP_404_NOT_FOUND)
        return Response(subscription)


class SubscriptionCancelAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        subscription = SubscriptionService.cancel_subscription(
            pk,
            user=request.user,
            context=AuditContext.from_request(request),
        )
        return Response(subscription)
