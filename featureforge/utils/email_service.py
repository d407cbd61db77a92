import asyncio
import logging
from typing import MutableMapping, Optional

from fastapi import BackgroundTasks, Request
from fastapi_mail import FastMail, MessageSchema, MessageType

from featureforge.config.settings import settings
from .config_mail import get_mail_config

logger = logging.getLogger(__name__)

INVITATION_TEMPLATE = "invitation"


class EmailAnalytics:
    """
    Per-template delivery counters.

    The backing mapping is passed in so its lifetime belongs to whoever
    creates it (the app instance, or a test).
    """

    OUTCOMES = ("sent", "failed", "timeout", "skipped")

    def __init__(self, store: Optional[MutableMapping] = None):
        self._store = store if store is not None else {}

    def track(self, template: str, outcome: str) -> None:
        counters = self._store.setdefault(template, {o: 0 for o in self.OUTCOMES})
        counters[outcome] = counters.get(outcome, 0) + 1

    def summary(self) -> dict:
        totals = {o: 0 for o in self.OUTCOMES}
        for counters in self._store.values():
            for outcome, count in counters.items():
                totals[outcome] = totals.get(outcome, 0) + count
        return {
            "by_template": {name: dict(counters) for name, counters in self._store.items()},
            "totals": totals,
        }


def get_email_analytics(request: Request) -> EmailAnalytics:
    """Dependency returning the analytics instance owned by the app."""
    return request.app.state.email_analytics


def build_invitation_message(email_to: str, team_name: str, inviter_name: str, is_new_user: bool) -> MessageSchema:
    if is_new_user:
        action = (
            f'An account has been created for you. '
            f'<a href="{settings.FRONTEND_URL}/reset-password">Set your password</a> to get started.'
        )
    else:
        action = f'<a href="{settings.FRONTEND_URL}/teams">Open your teams</a> to get started.'

    return MessageSchema(
        subject=f"You've been added to {team_name} on FeatureForge",
        recipients=[email_to],
        body=f"""
        <p>{inviter_name} added you to the team <strong>{team_name}</strong>.</p>
        <p>{action}</p>
        """,
        subtype=MessageType.html,
    )


async def send_invitation_email(email_to: str, team_name: str, inviter_name: str, is_new_user: bool) -> bool:
    """
    Sends a team invitation email using FastAPI-Mail.

    Returns:
        bool: False when mail is not configured and nothing was sent
    """
    conf = get_mail_config()
    if conf is None:
        logger.warning(f"Mail is not configured, skipping invitation to {email_to}")
        return False

    message = build_invitation_message(email_to, team_name, inviter_name, is_new_user)
    fm = FastMail(conf)
    await fm.send_message(message)
    logger.info(f"📧 Invitation email sent to {email_to}")
    return True


async def deliver_invitation(
    analytics: EmailAnalytics,
    email_to: str,
    team_name: str,
    inviter_name: str,
    is_new_user: bool,
    timeout: Optional[float] = None
) -> None:
    """
    Sends an invitation under a hard timeout.

    Failures are logged and recorded, never raised: the invite itself has
    already been committed.
    """
    timeout = settings.EMAIL_SEND_TIMEOUT if timeout is None else timeout
    try:
        sent = await asyncio.wait_for(
            send_invitation_email(email_to, team_name, inviter_name, is_new_user),
            timeout=timeout
        )
        analytics.track(INVITATION_TEMPLATE, "sent" if sent else "skipped")
    except asyncio.TimeoutError:
        logger.error(f"❌ Invitation email to {email_to} timed out after {timeout}s")
        analytics.track(INVITATION_TEMPLATE, "timeout")
    except Exception as e:
        logger.error(f"❌ Invitation email to {email_to} failed: {e}")
        analytics.track(INVITATION_TEMPLATE, "failed")


async def dispatch_invitation(
    background_tasks: Optional[BackgroundTasks],
    analytics: EmailAnalytics,
    email_to: str,
    team_name: str,
    inviter_name: str,
    is_new_user: bool
) -> None:
    """
    Queues the invitation on the response's background tasks, or sends it
    inline when background delivery is disabled or unavailable.
    """
    if settings.EMAIL_USE_BACKGROUND and background_tasks is not None:
        background_tasks.add_task(
            deliver_invitation, analytics, email_to, team_name, inviter_name, is_new_user
        )
        return

    await deliver_invitation(analytics, email_to, team_name, inviter_name, is_new_user)
