from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.access_policy import AccessPolicy
from apps.audit import AuditContext

from .serializers import ProjectCreateSerializer, ProjectUpdateSerializer
from .services import ProjectService


class ProjectListCreateAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        show_all = AccessPolicy.is_admin(request.user) and request.query_params.get("all") in {"1", "true"}
        owner = None if show_all else request.user
        return Response(ProjectService.list_projects(owner=owner))

    def post(self, request):
        serializer = ProjectCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        project = ProjectService.create_project(
            serializer.validated_data,
            owner=request.user,
            context=AuditContext.from_request(request),
        )
        return Response(project, status=status.HTTP_201_CREATED)


class ProjectDetailAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        return Response(ProjectService.get_project(pk))

    def patch(self, request, pk):
        serializer = ProjectUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        project = ProjectService.update_project(
            pk,
            dict(serializer.validated_data),
            actor=request.user,
            context=AuditContext.from_request(request),
        )
        return Response(project)

    def delete(self, request, pk):
        ProjectService.delete_project(pk, actor=request.user, context=AuditContext.from_request(request))
        return Response(status=status.HTTP_204_NO_CONTENT)
