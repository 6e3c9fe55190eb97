from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model

from marathons import services
from marathons.actors import resolve_actor
from marathons.models import Marathon, Participant, Team
from marathons.payloads import OpenPositionPayload

User = get_user_model()


class Command(BaseCommand):
    help = "Seeds the database with a sample marathon, participants and teams"

    def handle(self, *args, **options):
        self.stdout.write("🌱 Seeding data...")

        # 1. Ensure Users
        admin, _ = User.objects.get_or_create(username="admin", defaults={"email": "admin@example.com", "role": "admin"})
        if not admin.check_password("admin"):
            admin.set_password("admin")
            admin.save()

        runners = []
        for name in ["alice", "bob", "carol", "dave", "erin"]:
            user, created = User.objects.get_or_create(username=name, defaults={"email": f"{name}@example.com"})
            if created:
                user.set_password("password")
                user.save()
            runners.append(user)

        # 2. Create Marathon
        marathon = Marathon.objects.filter(slug="demo").first()
        if marathon is None:
            marathon = services.create_marathon(admin, name="Demo Marathon", slug="demo", min_team_size=2, max_team_size=4)
        self.stdout.write(f"Used Marathon: {marathon.name}")

        participants = []
        for user in runners:
            participant = Participant.objects.filter(marathon=marathon, user=user).first()
            if participant is None:
                participant = services.join_marathon(marathon, user)
            participants.append(participant)

        # 3. Teams: one dictatorship led by alice, one democracy started by carol
        teams_data = [
            ("Night Owls", Team.DECISION_DICTATORSHIP, participants[0], [participants[1]]),
            ("Open Source Crew", Team.DECISION_DEMOCRACY, participants[2], [participants[3]]),
        ]
        for name, decision_system, founder, members in teams_data:
            if Team.objects.filter(marathon=marathon, name=name).exists():
                continue
            founder.refresh_from_db()
            if founder.team_id is not None:
                continue
            team = services.create_team(
                marathon, resolve_actor(marathon, founder.user), name=name, decision_system=decision_system
            )
            for member in members:
                member.refresh_from_db()
                if member.team_id is None:
                    services.add_member(team, member)
            self.stdout.write(f"Created Team: {team.name}")

        # 4. Leader proposals go through at once
        night_owls = Team.objects.filter(marathon=marathon, name="Night Owls").first()
        if night_owls is not None and not night_owls.open_positions.exists():
            services.create_team_request(
                night_owls,
                resolve_actor(marathon, runners[0]),
                OpenPositionPayload(role="designer", description="UI and branding"),
            )

        self.stdout.write("✅ Seeding Complete!")
