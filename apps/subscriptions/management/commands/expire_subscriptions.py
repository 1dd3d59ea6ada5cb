from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.subscriptions.services import SubscriptionService


class Command(BaseCommand):
    help = "Marks live subscriptions whose end date has passed as expired."

    def handle(self, *args, **options):
        expired = SubscriptionService.expire_subscriptions(now=timezone.now())
        self.stdout.write(self.style.SUCCESS(f"expire_subscriptions: expired={expired}"))
