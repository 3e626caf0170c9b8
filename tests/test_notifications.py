from unittest.mock import AsyncMock

import pytest

from leadloop.models import NotificationEvent
from leadloop.services import notifications


class TestLeadReply:

    def test_includes_name_and_booking_link(self, acme):
        message = notifications.plan_lead_reply(acme, {"name": "Jo", "phone": "4165551234"})

        assert message.event == NotificationEvent.NEW_LEAD
        assert message.to_phone == "+14165551234"
        assert message.from_phone == "+14165550000"
        assert "Jo" in message.body
        assert "https://acme.example/book" in message.body

    def test_without_booking_link_uses_follow_up_phrase(self, acme):
        acme["booking_link"] = None
        message = notifications.plan_lead_reply(acme, {"name": "Jo", "phone": "4165551234"})

        assert "get back to you" in message.body
        assert "book" not in message.body.lower()

    def test_no_phone_no_message(self, acme):
        assert notifications.plan_lead_reply(acme, {"name": "Jo", "phone": None}) is None
        assert notifications.plan_lead_reply(acme, {"name": "Jo", "phone": "  "}) is None

    def test_custom_template_wins(self, acme):
        acme["custom_sms_template"] = "Yo {name} from {business}: {booking}"
        message = notifications.plan_lead_reply(acme, {"name": "Jo", "phone": "4165551234"})

        assert message.body == "Yo Jo from Acme Plumbing: https://acme.example/book"

    def test_missing_name_renders_empty(self, acme):
        message = notifications.plan_lead_reply(acme, {"phone": "4165551234"})
        assert message.body.startswith("Hey , thanks")

    def test_no_client_number_leaves_sender_to_system_default(self, acme):
        acme["twilio_number"] = None
        message = notifications.plan_lead_reply(acme, {"name": "Jo", "phone": "4165551234"})
        assert message.from_phone is None


class TestMissedCall:

    @pytest.mark.parametrize("status", ["no-answer", "busy", "failed", "No-Answer"])
    def test_missed_statuses_trigger_reply(self, acme, status):
        message = notifications.plan_missed_call_reply(acme, "+14165551234", status)

        assert message.event == NotificationEvent.MISSED_CALL
        assert message.to_phone == "+14165551234"
        assert "Sorry we missed your call at Acme Plumbing" in message.body
        assert "https://acme.example/book" in message.body

    @pytest.mark.parametrize("status", ["completed", "answered", "in-progress", "", None])
    def test_other_statuses_do_not_trigger(self, acme, status):
        assert notifications.plan_missed_call_reply(acme, "+14165551234", status) is None

    def test_without_booking_link_uses_generic_follow_up(self, acme):
        acme["booking_link"] = ""
        message = notifications.plan_missed_call_reply(acme, "+14165551234", "no-answer")

        assert "Reply to this text and we'll get back to you soon." in message.body

    def test_missing_caller_no_message(self, acme):
        assert notifications.plan_missed_call_reply(acme, None, "busy") is None

    def test_custom_template_used(self, acme):
        acme["custom_sms_template"] = "Missed you! {{booking_link}}"
        message = notifications.plan_missed_call_reply(acme, "4165551234", "busy")
        assert message.body == "Missed you! https://acme.example/book"


class TestReviewRouting:

    def test_five_star_surfaces_public_link(self, acme):
        routing = notifications.route_review(acme, {"rating": 5})

        assert routing.public_review_link == "https://g.page/acme/review"
        assert routing.owner_email is None

    @pytest.mark.parametrize("rating", [4, 3, 1])
    def test_low_rating_emails_owner(self, acme, rating):
        routing = notifications.route_review(acme, {"rating": rating, "name": "Sam", "comments": "Late"})

        assert routing.public_review_link is None
        assert routing.owner_email.to_email == "owner@acme.example"
        assert f"{rating}-star" in routing.owner_email.subject
        assert "Late" in routing.owner_email.html

    def test_low_rating_without_owner_email_sends_nothing(self, acme):
        acme["owner_email"] = None
        routing = notifications.route_review(acme, {"rating": 2})

        assert routing.public_review_link is None
        assert routing.owner_email is None

    def test_owner_email_escapes_customer_input(self, acme):
        routing = notifications.route_review(acme, {"rating": 1, "comments": "<script>x</script>"})
        assert "<script>" not in routing.owner_email.html


class TestReviewRequest:

    def test_default_template(self, acme):
        message = notifications.plan_review_request(acme, "Sam", "416-555-1234")

        assert message.event == NotificationEvent.REVIEW_REQUESTED
        assert message.to_phone == "+14165551234"
        assert message.body.startswith("Hi Sam, thanks for choosing Acme Plumbing!")
        assert "https://g.page/acme/review" in message.body

    def test_name_falls_back_to_there(self, acme):
        message = notifications.plan_review_request(acme, None, "4165551234")
        assert message.body.startswith("Hi there,")

    def test_client_template(self, acme):
        acme["review_sms_template"] = "{{name}}, review {{business_name}}: {{review_link}}"
        message = notifications.plan_review_request(acme, "Sam", "4165551234")
        assert message.body == "Sam, review Acme Plumbing: https://g.page/acme/review"

    def test_requires_review_link(self, acme):
        acme["google_review_link"] = None
        assert notifications.plan_review_request(acme, "Sam", "4165551234") is None

    def test_auto_review_requires_flag(self, acme):
        contact = {"name": "Sam", "phone": "4165551234"}
        assert notifications.plan_auto_review(acme, contact) is None

        acme["auto_review_enabled"] = True
        message = notifications.plan_auto_review(acme, contact)
        assert message.event == NotificationEvent.CUSTOMER_CREATED
        assert "https://g.page/acme/review" in message.body


class TestDelivery:

    async def test_deliver_sms_success(self, acme, sms):
        message = notifications.plan_lead_reply(acme, {"name": "Jo", "phone": "4165551234"})

        assert await notifications.deliver_sms(sms, message) is True
        sms.send_sms.assert_awaited_once_with(
            to_phone="+14165551234", body=message.body, from_phone="+14165550000",
        )

    async def test_deliver_sms_swallows_exceptions(self, acme, sms):
        sms.send_sms = AsyncMock(side_effect=RuntimeError("twilio down"))
        message = notifications.plan_lead_reply(acme, {"name": "Jo", "phone": "4165551234"})

        assert await notifications.deliver_sms(sms, message) is False

    async def test_deliver_sms_reports_unsuccessful_result(self, acme, sms):
        sms.send_sms = AsyncMock(return_value={"success": False, "error": "invalid number"})
        message = notifications.plan_lead_reply(acme, {"name": "Jo", "phone": "4165551234"})

        assert await notifications.deliver_sms(sms, message) is False

    async def test_nothing_planned_nothing_sent(self, sms, email):
        assert await notifications.deliver_sms(sms, None) is False
        assert await notifications.deliver_email(email, None) is False
        sms.send_sms.assert_not_awaited()
        email.send_email.assert_not_awaited()

    async def test_deliver_email_swallows_exceptions(self, acme, email):
        email.send_email = AsyncMock(side_effect=RuntimeError("resend down"))
        routing = notifications.route_review(acme, {"rating": 2})

        assert await notifications.deliver_email(email, routing.owner_email) is False
