from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "action", "entity_type", "entity_id", "actor_name", "origin_address")
    list_filter = ("action", "entity_type", "created_at")
    search_fields = ("entity_id", "actor_name", "description", "origin_address")
    readonly_fields = [field.name for field in AuditLog._meta.fields]
    date_hierarchy = "created_at"
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
