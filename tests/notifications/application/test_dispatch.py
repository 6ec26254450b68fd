"""Tests for submitting and running notification tasks."""

import pytest
from notifications.notification.dispatch import run_notification_task, run_submitted_tasks, submit_notification
from notifications.notification.notification import NotificationTaskRepository
from notifications.sms.queue import SMSQueueRepository


@pytest.fixture
def order(make_user, make_product, make_order):
    user = make_user()
    return make_order(user.id, [(make_product(price=25.0), 2)], paid=True)


class TestSubmit:
    def test_task_is_recorded_as_submitted(self, order):
        task = submit_notification("order_confirmation", order_id=order.id)
        stored = NotificationTaskRepository().get(task.id)
        assert stored.status == "submitted"
        assert stored.payload == {"order_id": order.id}

    def test_unknown_kind_returns_none(self):
        assert submit_notification("birthday", user_id="u") is None


class TestRun:
    def test_queues_sms_and_sends_email(self, order, email_channel, sms_channel):
        task = submit_notification("order_confirmation", order_id=order.id)

        finished = run_notification_task(task.id)

        assert finished.status == "completed"
        assert finished.results == {"sms": "queued", "email": "sent"}
        assert email_channel.outbox[0]["to"] == "ama@example.com"
        assert email_channel.outbox[0]["subject"] == f"Order {order.order_number} Confirmed"

        entry = SMSQueueRepository().find_one({"order_id": order.id})
        assert entry.type == "ORDER_CONFIRMATION"
        assert entry.priority == 1
        assert entry.to == "0241234567"
        # never sent inline
        assert sms_channel.outbox == []

    def test_phone_falls_back_to_shipping_address(self, make_user, make_product, make_order):
        user = make_user(phone=None)
        order = make_order(user.id, [(make_product(), 1)], paid=True)

        task = submit_notification("order_processing", order_id=order.id)
        finished = run_notification_task(task.id)

        assert finished.results["sms"] == "queued"
        assert SMSQueueRepository().find_one({"order_id": order.id}).to == "0241234567"

    def test_email_failure_does_not_block_sms(self, order, email_channel):
        email_channel.configure(should_succeed=False, failure_reason="Mailbox full")
        task = submit_notification("order_shipped", order_id=order.id)

        finished = run_notification_task(task.id)

        assert finished.status == "completed"
        assert finished.results["sms"] == "queued"
        assert finished.results["email"] == "failed: Mailbox full"

    def test_missing_contact_details_are_skipped(self, make_user, email_channel):
        user = make_user(email=None, phone=None)
        task = submit_notification("welcome", user_id=user.id)

        finished = run_notification_task(task.id)

        assert finished.results == {"sms": "skipped"}
        assert SMSQueueRepository().count() == 0

    def test_task_runs_once(self, order):
        task = submit_notification("order_confirmation", order_id=order.id)
        run_notification_task(task.id)

        assert run_notification_task(task.id) is None
        assert SMSQueueRepository().count() == 1

    def test_dispatch_error_fails_task(self):
        task = submit_notification("order_confirmation", order_id="missing-order")

        finished = run_notification_task(task.id)

        assert finished.status == "failed"
        assert finished.error

    def test_run_submitted_tasks(self, order):
        submit_notification("order_confirmation", order_id=order.id)
        submit_notification("refund_approved", order_id=order.id, amount=50.0)

        assert run_submitted_tasks() == 2
        assert NotificationTaskRepository().count({"status": "completed"}) == 2
