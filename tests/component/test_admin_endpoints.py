"""Component tests for the admin API."""

from core.enums import SenderType
from core.models import Message, Topic
from tests.base import BaseComponentTest
from tests.factories import auth_headers, create_message, create_user

JSON = "application/json"


def admin_headers(subject="admin-1"):
    return auth_headers(subject, name="Admin", permissions="notifications_admin")


class TestAdminEndpoints(BaseComponentTest):
    """Tests for /admin endpoints."""

    def test_requires_admin(self):
        """Test regular users are forbidden."""
        response = self.client.get(self.url("admin/topics"), **auth_headers("u1"))

        self.assertEqual(response.status_code, 403)

    def test_admin_flag_is_accepted(self):
        """Test the admin claim grants access as well as the permission."""
        response = self.client.get(
            self.url("admin/topics"), **auth_headers("u1", admin=True)
        )

        self.assertEqual(response.status_code, 200)

    def test_app_versions_and_platforms(self):
        """Test releases recorded from tokens are listed."""
        self.client.post(
            self.url("token"),
            {"token": "t1", "appPlatform": "ios", "appVersion": "2.0"},
            content_type=JSON,
            **auth_headers("u1"),
        )

        versions = self.client.get(self.url("admin/app-versions"), **admin_headers())
        platforms = self.client.get(self.url("admin/app-platforms"), **admin_headers())

        self.assertEqual(versions.json(), [{"name": "2.0"}])
        self.assertEqual(platforms.json(), [{"name": "ios"}])

    def test_update_topic(self):
        """Test a topic description can be changed."""
        create_user("u1", topics=["news"])

        response = self.client.post(
            self.url("admin/topic"),
            {"name": "news", "description": "Campus news"},
            content_type=JSON,
            **admin_headers(),
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Topic.objects.get(name="news").description, "Campus news")

    def test_update_missing_topic(self):
        """Test unknown topics are reported."""
        response = self.client.post(
            self.url("admin/topic"),
            {"name": "missing", "description": "x"},
            content_type=JSON,
            **admin_headers(),
        )

        self.assertEqual(response.status_code, 404)

    def test_send_administrative_message(self):
        """Test admins send as administrative senders."""
        response = self.client.post(
            self.url("admin/messages"),
            {"subject": "Notice", "recipients": [{"user_id": "u1"}]},
            content_type=JSON,
            **admin_headers(),
        )

        self.assertEqual(response.status_code, 200)
        sender = response.json()["sender"]
        self.assertEqual(sender["type"], SenderType.ADMINISTRATIVE.value)
        self.assertEqual(sender["user"], {"user_id": "admin-1", "name": "Admin"})

    def test_list_messages(self):
        """Test the tenant's messages can be filtered by sender."""
        mine = create_message(sender_type=SenderType.USER, sender_account_id="s1")
        create_message(sender_type=SenderType.USER, sender_account_id="s2")
        create_message(org_id="other-org")

        everything = self.client.get(self.url("admin/messages"), **admin_headers())
        by_sender = self.client.get(
            self.url("admin/messages"), {"sender_id": "s1"}, **admin_headers()
        )

        self.assertEqual(len(everything.json()), 2)
        self.assertEqual([m["id"] for m in by_sender.json()], [mine.id])

    def test_get_update_delete_message(self):
        """Test message administration."""
        message = create_message(recipients=["u1"], priority=1)
        url = self.url(f"admin/message/{message.id}")

        fetched = self.client.get(url, **admin_headers())
        updated = self.client.put(
            url, {"priority": 5, "subject": "Edited"}, content_type=JSON, **admin_headers()
        )
        deleted = self.client.delete(url, **admin_headers())

        self.assertEqual(fetched.json()["id"], message.id)
        self.assertEqual(updated.json()["priority"], 5)
        self.assertEqual(updated.json()["subject"], "Edited")
        self.assertEqual(deleted.status_code, 200)
        self.assertFalse(Message.objects.exists())

    def test_get_missing_message(self):
        """Test unknown messages are reported."""
        response = self.client.get(self.url("admin/message/missing"), **admin_headers())

        self.assertEqual(response.status_code, 404)
