from django.db import models


class EntityType(models.TextChoices):
    USER = "USER", "User"
    PROJECT = "PROJECT", "Project"
    TASK = "TASK", "Task"
    SUBSCRIPTION = "SUBSCRIPTION", "Subscription"
    SUBSCRIPTION_PLAN = "SUBSCRIPTION_PLAN", "Subscription plan"
    PAYMENT = "PAYMENT", "Payment"


class AuditAction(models.TextChoices):
    CREATED = "CREATED", "Created"
    UPDATED = "UPDATED", "Updated"
    DELETED = "DELETED", "Deleted"
    STATUS_CHANGED = "STATUS_CHANGED", "Status changed"

    # Reserved, no operation is bound to these yet.
    VIEWED = "VIEWED", "Viewed"
    LOGIN = "LOGIN", "Login"
    LOGOUT = "LOGOUT", "Logout"
    ASSIGNED = "ASSIGNED", "Assigned"
    UNASSIGNED = "UNASSIGNED", "Unassigned"


SYSTEM_ACTOR = "system"
