from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.audit import AuditContext

from .access_policy import AccessPolicy
from .permissions import IsAdminRole
from .serializers import UserCreateSerializer, UserSerializer
from .services import UserService


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)


class UserListCreateAPIView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def get(self, request):
        return Response(UserService.list_users())

    def post(self, request):
        serializer = UserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserService.create_user(
            serializer.validated_data,
            context=AuditContext.from_request(request),
        )
        return Response(user, status=status.HTTP_201_CREATED)


class UserDetailAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        if not AccessPolicy.can_view_user(request.user, pk):
            raise PermissionDenied("Access denied.")
        return Response(UserService.get_user(pk))

    def delete(self, request, pk):
        if not AccessPolicy.can_manage_users(request.user):
            raise PermissionDenied("Access denied.")
        UserService.delete_user(pk, context=AuditContext.from_request(request))
        return Response(status=status.HTTP_204_NO_CONTENT)
