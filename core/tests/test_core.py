from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from core.exceptions import Conflict
from core.models import DomainActivity
from core.services import ActivityService


User = get_user_model()


class HealthCheckTests(APITestCase):
    def test_health_is_public(self):
        client = APIClient()
        res = client.get(reverse("health-check"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "ok")
        self.assertTrue(res.data["db"])


class ConflictTests(TestCase):
    def test_conflict_maps_to_409(self):
        self.assertEqual(Conflict.status_code, 409)
        self.assertEqual(Conflict().get_codes(), "conflict")


class ActivityServiceTests(TestCase):
    def test_log_and_history(self):
        user = User.objects.create_user(username="u", email="u@example.com", password="pass1234")

        ActivityService.log_activity(actor=user, verb="user.touched", target=user, metadata={"n": 1})
        ActivityService.log_activity(actor=None, verb="user.touched_again", target=user)

        history = ActivityService.history_for(user)
        self.assertEqual([a.verb for a in history], ["user.touched_again", "user.touched"])
        self.assertEqual(DomainActivity.objects.get(verb="user.touched").metadata, {"n": 1})
