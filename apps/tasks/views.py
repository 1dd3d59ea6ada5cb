from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.audit import AuditContext

from .serializers import (
    TaskCreateSerializer,
    TaskStatusUpdateSerializer,
    TaskUpdateSerializer,
)
from .services import TaskService


class TaskListCreateAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        params = request.query_params
        return Response(
            TaskService.list_tasks(
                project_id=params.get("project_id"),
                assigned_to_id=params.get("assigned_to_id"),
                status=params.get("status"),
                priority=params.get("priority"),
            )
        )

    def post(self, request):
        serializer = TaskCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = TaskService.create_task(
            serializer.validated_data,
            creator=request.user,
            context=AuditContext.from_request(request),
        )
        return Response(task, status=status.HTTP_201_CREATED)


class TaskMyAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(TaskService.list_tasks(assigned_to_id=request.user.id))


class TaskOverdueAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(TaskService.list_overdue_tasks())


class TaskDetailAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        return Response(TaskService.get_task(pk))

    def patch(self, request, pk):
        serializer = TaskUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        task = TaskService.update_task(
            pk,
            dict(serializer.validated_data),
            actor=request.user,
            context=AuditContext.from_request(request),
        )
        return Response(task)

    def delete(self, request, pk):
        TaskService.delete_task(pk, actor=request.user, context=AuditContext.from_request(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


class TaskStatusAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request, pk):
        serializer = TaskStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = TaskService.update_task_status(
            pk,
            serializer.validated_data["status"],
            actor=request.user,
            context=AuditContext.from_request(request),
        )
        return Response(task)
