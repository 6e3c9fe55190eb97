from django.test import SimpleTestCase

from marathons.models import TeamRequest
from marathons.payloads import (
    ChangeDecisionSystemPayload,
    InvalidPayload,
    KickPayload,
    UpdateSettingsPayload,
    payload_from_dict,
    request_type_of,
)


class PayloadParsingTests(SimpleTestCase):
    def test_ids_are_coerced_and_required(self):
        payload = payload_from_dict(TeamRequest.TYPE_KICK, {"member_id": "12"})
        self.assertEqual(payload, KickPayload(member_id=12))
        self.assertEqual(request_type_of(payload), TeamRequest.TYPE_KICK)

        with self.assertRaises(InvalidPayload) as ctx:
            payload_from_dict(TeamRequest.TYPE_KICK, {})
        self.assertIn("member_id", ctx.exception.errors)

    def test_dictatorship_needs_leader_and_democracy_drops_it(self):
        with self.assertRaises(InvalidPayload):
            payload_from_dict(TeamRequest.TYPE_CHANGE_DECISION_SYSTEM, {"decision_system": "dictatorship"})

        payload = payload_from_dict(
            TeamRequest.TYPE_CHANGE_DECISION_SYSTEM, {"decision_system": "democracy", "leader_id": 3}
        )
        self.assertEqual(payload, ChangeDecisionSystemPayload(decision_system="democracy", leader_id=None))

    def test_update_settings_accepts_only_cosmetic_fields(self):
        payload = payload_from_dict(TeamRequest.TYPE_UPDATE_SETTINGS, {"changes": {"genre": " rpg "}})
        self.assertEqual(payload, UpdateSettingsPayload(changes={"genre": "rpg"}))

        with self.assertRaises(InvalidPayload):
            payload_from_dict(TeamRequest.TYPE_UPDATE_SETTINGS, {"changes": {"member_count": 9}})
        with self.assertRaises(InvalidPayload):
            payload_from_dict(TeamRequest.TYPE_UPDATE_SETTINGS, {"changes": {"management_type": "chaos"}})

    def test_unknown_type(self):
        with self.assertRaises(InvalidPayload):
            payload_from_dict("promote", {})

    def test_update_settings_follows_team_field_rules(self):
        with self.assertRaises(InvalidPayload) as ctx:
            payload_from_dict(
                TeamRequest.TYPE_UPDATE_SETTINGS,
                {"changes": {"genre": "g" * 300, "chat_link": "javascript:alert(1)", "name": ""}},
            )
        self.assertEqual(set(ctx.exception.errors), {"genre", "chat_link", "name"})

        payload = payload_from_dict(
            TeamRequest.TYPE_UPDATE_SETTINGS,
            {"changes": {"pitch_document": "https://docs.example.com/pitch"}},
        )
        self.assertEqual(payload.changes, {"pitch_document": "https://docs.example.com/pitch"})
