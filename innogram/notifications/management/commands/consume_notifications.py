import signal

from django.core.management.base import BaseCommand

from innogram.notifications.consumer import NotificationConsumer


class Command(BaseCommand):
    help = "Consume notification events from the broker until SIGINT/SIGTERM."

    def add_arguments(self, parser):
        parser.add_argument(
            "--max-messages",
            type=int,
            default=None,
            help="Stop after handling this many messages.",
        )

    def handle(self, *args, **options):
        consumer = NotificationConsumer()

        def _stop(signum, frame):
            self.stdout.write(f"Received signal {signum}, finishing current message...")
            consumer.stop()

        signal.signal(signal.SIGINT, _stop)
        signal.signal(signal.SIGTERM, _stop)

        processed = consumer.run(max_messages=options["max_messages"])
        self.stdout.write(self.style.SUCCESS(f"Processed {processed} notification events."))
