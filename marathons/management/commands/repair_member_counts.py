from django.core.management.base import BaseCommand, CommandError

from marathons.models import Marathon
from marathons.services.membership import reconcile_member_counts


class Command(BaseCommand):
    help = "Recomputes team member counts from the participant roster and dissolves empty teams"

    def add_arguments(self, parser):
        parser.add_argument("--marathon", metavar="SLUG", help="Only repair teams of this marathon")

    def handle(self, *args, **options):
        marathon = None
        slug = options.get("marathon")
        if slug:
            try:
                marathon = Marathon.objects.get(slug=slug.lower())
            except Marathon.DoesNotExist:
                raise CommandError(f"Marathon '{slug}' does not exist")

        corrected = reconcile_member_counts(marathon)
        self.stdout.write(self.style.SUCCESS(f"Repaired {corrected} team(s)."))
