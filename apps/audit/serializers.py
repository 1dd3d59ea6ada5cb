from rest_framework import serializers

from .events import AuditAction, EntityType
from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = AuditLog
        fields = (
            "id",
            "entity_type",
            "entity_id",
            "action",
            "actor_id",
            "actor_name",
            "previous_state",
            "new_state",
            "description",
            "origin_address",
            "origin_agent",
            "created_at",
        )
        read_only_fields = fields


class AuditLogFilterSerializer(serializers.Serializer):
    entity_type = serializers.ChoiceField(choices=EntityType.choices, required=False)
    entity_id = serializers.CharField(required=False, max_length=100)
    actor_id = serializers.CharField(required=False, max_length=100)
    actor_name = serializers.CharField(required=False, max_length=150)
    action = serializers.ChoiceField(choices=AuditAction.choices, required=False)
    start_date = serializers.DateTimeField(required=False)
    end_date = serializers.DateTimeField(required=False)

    def validate(self, attrs):
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError({"end_date": "Must not be earlier than start_date."})
        return attrs

    def filter_queryset(self, qs):
        data = self.validated_data
        if "entity_type" in data:
            qs = qs.filter(entity_type=data["entity_type"])
        if "entity_id" in data:
            qs = qs.filter(entity_id=data["entity_id"])
        if "actor_id" in data:
            qs = qs.for_actor(data["actor_id"])
        if "actor_name" in data:
            qs = qs.filter(actor_name=data["actor_name"])
        if "action" in data:
            qs = qs.for_action(data["action"])
        return qs.between(data.get("start_date"), data.get("end_date"))
