from django.core.management.base import BaseCommand

from entitlements import wiring


class Command(BaseCommand):
    help = "Mark confirmed bookings whose date has passed as completed."

    def handle(self, *args, **options):
        count = wiring.get_scheduler().complete_elapsed_bookings()
        self.stdout.write(self.style.SUCCESS(f"Completed {count} booking(s)."))
