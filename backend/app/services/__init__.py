"""Lazy service exports so importing one service does not pull in the whole graph."""

__all__ = [
    "content_service",
    "workflow_service",
    "notification_service",
    "email_service",
    "scheduled_publisher",
    "editorial_policy_service",
]


def __getattr__(name: str):
    if name == "content_service":
        from app.services.content_service import content_service

        return content_service
    if name == "workflow_service":
        from app.services.workflow_service import workflow_service

        return workflow_service
    if name == "notification_service":
        from app.services.notification_service import notification_service

        return notification_service
    if name == "email_service":
        from app.services.email_service import email_service

        return email_service
    if name == "scheduled_publisher":
        from app.services.scheduled_publisher import scheduled_publisher

        return scheduled_publisher
    if name == "editorial_policy_service":
        from app.services.editorial_policy_service import editorial_policy_service

        return editorial_policy_service
    raise AttributeError(name)
