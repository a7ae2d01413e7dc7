"""
Management command to seed a user's lumber inventory with common species
"""
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from grain.inventory.models import Lumber

# (name, Janka hardness in lbf, default cost per board foot)
SPECIES = [
    ('Pine', '380', '3.00'),
    ('Cedar', '900', '5.50'),
    ('Poplar', '540', '4.00'),
    ('Cherry', '950', '9.00'),
    ('Walnut', '1010', '12.00'),
    ('Red Oak', '1220', '6.50'),
    ('White Oak', '1360', '8.00'),
    ('Ash', '1320', '6.00'),
    ('Hard Maple', '1450', '7.50'),
    ('Teak', '1070', '25.00'),
    ('Mahogany', '800', '14.00'),
    ('Cenízaro', '630', '8.50'),
    ('Cristóbal', '2060', '18.00'),
    ('Purpleheart', '2520', '15.00'),
]


class Command(BaseCommand):
    help = "Adds common lumber species to a user's inventory"

    def add_arguments(self, parser):
        parser.add_argument(
            '--username',
            required=True,
            help='Owner of the new lumber rows',
        )
        parser.add_argument(
            '--clear',
            action='store_true',
            help="Hard delete the user's existing lumber before adding species",
        )

    def handle(self, *args, **options):
        User = get_user_model()
        try:
            user = User.objects.get(username=options['username'])
        except User.DoesNotExist:
            raise CommandError(f"User '{options['username']}' does not exist")

        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(self.style.SUCCESS(f"ADDING LUMBER SPECIES FOR {user.username}"))
        self.stdout.write(self.style.SUCCESS("=" * 80))

        if options['clear']:
            self.stdout.write(self.style.WARNING("Clearing existing lumber..."))
            # Rows still used by project boards are protected and stay in place
            cleared = 0
            for row in Lumber.objects.filter(user=user, boards__isnull=True).distinct():
                row.delete()
                cleared += 1
            self.stdout.write(self.style.SUCCESS(f"Cleared {cleared} lumber rows."))

        created_count = 0
        skipped_count = 0

        for name, janka, cost in SPECIES:
            lumber, created = Lumber.objects.get_or_create(
                user=user,
                name=name,
                is_deleted=False,
                defaults={
                    'janka_rating': Decimal(janka),
                    'cost_per_board_foot': Decimal(cost),
                    'tags': ['seed'],
                },
            )

            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f"  Created: {name}"))
            else:
                skipped_count += 1
                self.stdout.write(self.style.WARNING(f"  Skipped (already exists): {name}"))

        self.stdout.write(self.style.SUCCESS("\n" + "=" * 80))
        self.stdout.write(self.style.SUCCESS("SUMMARY"))
        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(f"Species Created: {created_count}")
        self.stdout.write(f"Species Skipped (already exist): {skipped_count}")
        self.stdout.write(f"Total Lumber for {user.username}: {Lumber.objects.filter(user=user, is_deleted=False).count()}")
