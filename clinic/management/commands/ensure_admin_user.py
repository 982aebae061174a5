import os

from django.core.management.base import BaseCommand

from clinic.services.auth import ensure_admin


class Command(BaseCommand):
    help = "Ensure the admin account exists with the given password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument('--username', default=os.getenv('ADMIN_USERNAME', 'admin'))
        parser.add_argument('--password', default=os.getenv('ADMIN_PASSWORD', 'admin123'))

    def handle(self, *args, **opts):
        admin = ensure_admin(opts['username'], opts['password'])
        self.stdout.write(self.style.SUCCESS(f"ok: {admin.username}"))
