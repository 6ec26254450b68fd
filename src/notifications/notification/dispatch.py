"""Notification submission and dispatch.

``submit_notification`` records a task and returns immediately; routes hand
the task id to FastAPI ``BackgroundTasks`` so ``run_notification_task``
executes after the response is sent. The dispatcher resolves the customer,
renders the template and fans out:

- SMS is queued (never sent inline) when a phone number is resolvable from
  the user record or the order's shipping address
- email is sent when the user has an address on file

Each channel succeeds or fails on its own; failures are logged and recorded
on the task, and nothing is raised back to the business action.
"""

from identity.user.contact import resolve_contact
from identity.user.user import UserRepository
from notifications.channel import get_channel
from notifications.notification.notification import (
    NotificationChannel,
    NotificationTask,
    NotificationTaskRepository,
    NotificationType,
    TaskStatus,
)
from notifications.sms.queue import SMSQueue, SMSType
from notifications.templates import get_template
from notifications.utils.logging import logger
from ordering.order.order import OrderRepository
from shared.config import get_settings

# Notification type -> SMS queue type
_SMS_TYPES = {
    NotificationType.WELCOME.value: SMSType.WELCOME.value,
    NotificationType.ORDER_CONFIRMATION.value: SMSType.ORDER_CONFIRMATION.value,
    NotificationType.ORDER_PROCESSING.value: SMSType.ORDER_PROCESSING.value,
    NotificationType.ORDER_SHIPPED.value: SMSType.ORDER_SHIPPED.value,
    NotificationType.ORDER_DELIVERED.value: SMSType.ORDER_DELIVERED.value,
    NotificationType.ORDER_CANCELLED.value: SMSType.ORDER_CANCELLED.value,
    NotificationType.PAYMENT_FAILED.value: SMSType.PAYMENT_FAILED.value,
    NotificationType.REFUND_APPROVED.value: SMSType.REFUND_APPROVED.value,
}


def submit_notification(kind: str, **payload) -> NotificationTask | None:
    """Record a notification task. Returns None if even that fails."""
    try:
        task = NotificationTask(kind=NotificationType(kind).value, payload=payload)
        NotificationTaskRepository().add(task)
        return task
    except Exception as e:
        logger.error("notification_submission_failed", kind=kind, payload=payload, error=str(e))
        return None


def run_notification_task(task_id: str) -> NotificationTask | None:
    return NotificationDispatcher().run(task_id)


def run_submitted_tasks(limit: int = 100) -> int:
    """Run tasks left in SUBMITTED, e.g. after a worker restart."""
    repo = NotificationTaskRepository()
    tasks = repo.find({"status": TaskStatus.SUBMITTED.value}, sort=[("submitted_at", 1)], limit=limit)
    dispatcher = NotificationDispatcher()
    for task in tasks:
        dispatcher.run(task.id)
    return len(tasks)


class NotificationDispatcher:
    def __init__(self) -> None:
        self.tasks = NotificationTaskRepository()

    def run(self, task_id: str) -> NotificationTask | None:
        task = self.tasks.claim(task_id)
        if task is None:
            logger.info("notification_task_not_claimable", task_id=task_id)
            return None

        try:
            results = self.dispatch(task)
            task.complete(results)
            logger.info("notification_task_completed", task_id=task.id, kind=task.kind, results=results)
        except Exception as e:
            task.fail(str(e))
            logger.error("notification_task_failed", task_id=task.id, kind=task.kind, error=str(e))

        self.tasks.add(task)
        return task

    def dispatch(self, task: NotificationTask) -> dict[str, str]:
        payload = task.payload
        order = None
        if payload.get("order_id"):
            order = OrderRepository().get(payload["order_id"])

        user_id = payload.get("user_id") or (order.user_id if order else None)
        user = UserRepository().get_or_none(user_id)
        contact = resolve_contact(user, order.shipping_address.model_dump() if order else None)

        settings = get_settings()
        context = {
            "customer_name": contact.name,
            "store_name": settings.store_name,
            "currency": settings.currency,
            **{k: v for k, v in payload.items() if k not in ("order_id", "user_id")},
        }
        if order is not None:
            context.update(
                order_number=order.order_number,
                total=order.total,
                tracking_number=order.tracking_number,
                estimated_delivery=order.estimated_delivery.strftime("%A, %d %B %Y") if order.estimated_delivery else None,
                order_url=f"{settings.store_url}/orders/{order.id}",
            )

        template = get_template(task.kind)
        rendered = template.render(context)
        channels = template.default_channels

        results = {}
        if NotificationChannel.SMS.value in channels:
            results["sms"] = self._queue_sms(task, template, rendered, contact.phone, order, user_id)
        if NotificationChannel.EMAIL.value in channels:
            results["email"] = self._send_email(task, rendered, contact.email)
        return results

    def _queue_sms(self, task, template, rendered, phone, order, user_id) -> str:
        if not phone:
            return "skipped"
        try:
            SMSQueue().enqueue(
                to=phone,
                content=rendered["sms"],
                sms_type=_SMS_TYPES[task.kind],
                priority=getattr(template, "sms_priority", 2),
                order_id=order.id if order else None,
                user_id=user_id,
            )
            return "queued"
        except Exception as e:
            logger.error("notification_sms_failed", task_id=task.id, kind=task.kind, error=str(e))
            return f"failed: {e}"

    def _send_email(self, task, rendered, email) -> str:
        if not email:
            return "skipped"
        try:
            result = get_channel(NotificationChannel.EMAIL.value).send(
                to=email,
                subject=rendered["subject"],
                text=rendered["body"],
            )
        except Exception as e:
            result = {"status": "failed", "error": str(e)}

        if result.get("status") == "sent":
            return "sent"
        logger.error("notification_email_failed", task_id=task.id, kind=task.kind, error=result.get("error"))
        return f"failed: {result.get('error')}"
