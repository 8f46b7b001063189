# app/orchestrator/temporal/activities/freight_delay.py
from __future__ import annotations

from temporalio import activity

from app.agents.delay_message_agent import DelayMessageAgent
from app.channels.notification_service import NotificationService
from app.channels.traffic_service import TrafficService
from app.common.tracing import set_workflow_id
from app.config import Settings
from app.orchestrator.temporal.common.backoff import BackoffPolicy


def _bind_workflow_id() -> None:
    """Stamp activity log records with the owning workflow id."""
    try:
        set_workflow_id(activity.info().workflow_id)
    except RuntimeError:  # called outside an activity context
        pass


class FreightDelayActivities:
    """
    Activities for FreightDelayWorkflow. The three adapters are built once at
    worker start and shared by every run the worker executes.
    """

    def __init__(
        self,
        traffic: TrafficService,
        messages: DelayMessageAgent,
        notifications: NotificationService,
    ) -> None:
        self.traffic = traffic
        self.messages = messages
        self.notifications = notifications

    @classmethod
    def from_settings(cls, settings: Settings) -> "FreightDelayActivities":
        policy = BackoffPolicy(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            base_delay=settings.retry_base_delay_seconds,
        )
        return cls(
            traffic=TrafficService(settings.ORS_API_KEY, policy=policy),
            messages=DelayMessageAgent(
                model=settings.OPENAI_MODEL,
                temperature=settings.OPENAI_TEMPERATURE,
                signature=settings.MESSAGE_SIGNATURE,
                policy=policy,
            ),
            notifications=NotificationService(
                settings.SENDGRID_API_KEY,
                sender=settings.SENDGRID_FROM_EMAIL,
                subject=settings.NOTIFICATION_SUBJECT,
                policy=policy,
            ),
        )

    @activity.defn(name="check_traffic")
    async def check_traffic(self, origin: str, destination: str) -> int:
        _bind_workflow_id()
        activity.logger.info("Starting traffic check activity: %s -> %s", origin, destination)
        try:
            delay = await self.traffic.get_delay_in_minutes(origin, destination)
        except Exception as e:
            activity.logger.error("Traffic check activity failed: %s", e)
            raise
        activity.logger.info("Traffic check activity completed: delay=%d", delay)
        return delay

    @activity.defn(name="generate_message")
    async def generate_message(self, delay_minutes: int, customer_name: str) -> str:
        _bind_workflow_id()
        result = await self.messages.generate(delay_minutes, customer_name)
        activity.logger.info(
            "Message created: source=%s length=%d", result.source, len(result.text)
        )
        return result.text

    @activity.defn(name="send_notification")
    async def send_notification(self, contact: str, message: str) -> None:
        _bind_workflow_id()
        activity.logger.info(
            "Starting notification activity: contact=%s type=%s",
            contact, "email" if "@" in contact else "unknown",
        )
        try:
            await self.notifications.send(contact, message)
        except Exception as e:
            activity.logger.error("Notification activity failed: %s", e)
            raise
        activity.logger.info("Notification activity completed: contact=%s", contact)

    def all(self) -> list:
        return [self.check_traffic, self.generate_message, self.send_notification]
