from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "entity_type",
                    models.CharField(
                        choices=[
                            ("USER", "User"),
                            ("PROJECT", "Project"),
                            ("TASK", "Task"),
                            ("SUBSCRIPTION", "Subscription"),
                            ("SUBSCRIPTION_PLAN", "Subscription plan"),
                            ("PAYMENT", "Payment"),
                        ],
                        max_length=30,
                        verbose_name="Entity type",
                    ),
                ),
                ("entity_id", models.CharField(max_length=100, verbose_name="Entity ID")),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("CREATED", "Created"),
                            ("UPDATED", "Updated"),
                            ("DELETED", "Deleted"),
                            ("STATUS_CHANGED", "Status changed"),
                            ("VIEWED", "Viewed"),
                            ("LOGIN", "Login"),
                            ("LOGOUT", "Logout"),
                            ("ASSIGNED", "Assigned"),
                            ("UNASSIGNED", "Unassigned"),
                        ],
                        max_length=30,
                        verbose_name="Action",
                    ),
                ),
                ("actor_id", models.CharField(blank=True, max_length=100, null=True, verbose_name="Actor ID")),
                ("actor_name", models.CharField(default="system", max_length=150, verbose_name="Actor")),
                ("previous_state", models.TextField(blank=True, null=True, verbose_name="Previous state")),
                ("new_state", models.TextField(blank=True, null=True, verbose_name="New state")),
                ("description", models.CharField(blank=True, max_length=500, verbose_name="Description")),
                ("origin_address", models.CharField(blank=True, max_length=45, null=True, verbose_name="Origin address")),
                ("origin_agent", models.CharField(blank=True, max_length=500, null=True, verbose_name="Origin agent")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created")),
            ],
            options={
                "verbose_name": "Audit log",
                "verbose_name_plural": "Audit log",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["entity_type", "entity_id"], name="idx_audit_entity"),
                    models.Index(fields=["actor_id"], name="idx_audit_actor"),
                    models.Index(fields=["action"], name="idx_audit_action"),
                    models.Index(fields=["created_at"], name="idx_audit_created"),
                ],
            },
        ),
    ]
