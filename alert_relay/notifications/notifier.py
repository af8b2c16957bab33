"""
PURPOSE: Best-effort outbound notification for newly stored alerts.

The dispatcher formats an alert into a subject/body pair and tries each
configured transport in order until one accepts it. Transport failures are
logged; total failure is logged too and never raised, so ingestion requests
cannot fail because of notification delivery.

All transport identifiers come from NotificationConfig, built from settings
at startup and passed in explicitly.

CALLED BY:
    - events/handlers.py handle_alert_created_notify (alert_created event)
    - api/routes_webhook.py via the same event
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import httpx

from alert_relay.config.constants import DEFAULT_TIMEFRAME
from alert_relay.utils.logger import get_logger
from alert_relay.utils.time_utils import get_utc_now
from alert_relay.webhook.errors import NotificationError

logger = get_logger(__name__)

EMAILJS_SEND_URL = "https://api.emailjs.com/api/v1.0/email/send"
FORMSPREE_URL_TEMPLATE = "https://formspree.io/f/{form_id}"
WEB3FORMS_SUBMIT_URL = "https://api.web3forms.com/submit"


@dataclass(frozen=True)
class NotificationConfig:
    """
    Explicit configuration for notification delivery.

    Attributes:
        enabled: Master switch; disabled dispatchers do nothing.
        recipient: Destination email address.
        transports: Transport names in the order they are tried.
        timeout_seconds: Per-request HTTP timeout.
        emailjs_service_id / emailjs_template_id / emailjs_user_id: EmailJS ids.
        formspree_form_id: Formspree form id.
        web3forms_access_key: Web3Forms access key.
    """

    enabled: bool = False
    recipient: str = ""
    transports: Sequence[str] = ("emailjs", "formspree", "web3forms")
    timeout_seconds: float = 10.0
    emailjs_service_id: str = ""
    emailjs_template_id: str = ""
    emailjs_user_id: str = ""
    formspree_form_id: str = ""
    web3forms_access_key: str = ""

    @classmethod
    def from_settings(cls, settings: Any) -> "NotificationConfig":
        """Build the config from the application Settings object."""
        return cls(
            enabled=settings.NOTIFICATIONS_ENABLED,
            recipient=settings.NOTIFY_EMAIL,
            transports=tuple(settings.get_notification_transports()),
            timeout_seconds=settings.NOTIFICATION_TIMEOUT_SECONDS,
            emailjs_service_id=settings.EMAILJS_SERVICE_ID,
            emailjs_template_id=settings.EMAILJS_TEMPLATE_ID,
            emailjs_user_id=settings.EMAILJS_USER_ID,
            formspree_form_id=settings.FORMSPREE_FORM_ID,
            web3forms_access_key=settings.WEB3FORMS_ACCESS_KEY,
        )


@dataclass(frozen=True)
class AlertNotification:
    """Rendered notification for one alert."""

    subject: str
    body: str
    fields: Dict[str, str] = field(default_factory=dict)


def build_notification(alert: Dict[str, Any]) -> AlertNotification:
    """
    PURPOSE: Render the subject, plain-text body and template fields for an alert.

    Args:
        alert: Stored alert in wire form (camelCase keys, as sent on events).

    Returns:
        AlertNotification: Subject, body and template parameters.
    """
    action = alert.get("action", "")
    symbol = alert.get("symbol", "")
    timeframe = alert.get("timeframe") or DEFAULT_TIMEFRAME
    raw_message = alert.get("rawMessage") or ""
    sent_at = get_utc_now().strftime("%Y-%m-%d %H:%M:%S UTC")

    subject = f"Trading Alert: {action} {symbol}"

    lines = [
        "NEW TRADING ALERT",
        "",
        f"Action: {action}",
        f"Symbol: {symbol}",
        f"Entry Price: {alert.get('entry', '')}",
        f"Timeframe: {timeframe}m",
    ]
    if alert.get("target"):
        lines.append(f"Target: {alert['target']}")
    if alert.get("stop"):
        lines.append(f"Stop Loss: {alert['stop']}")
    if alert.get("rr"):
        lines.append(f"Risk/Reward: {alert['rr']}")
    lines += [
        "",
        f"Time: {sent_at}",
        "",
        "Original Message:",
        raw_message,
        "",
        "---",
        "Sent from TradingView Alert Relay",
    ]

    fields = {
        "alert_action": action,
        "alert_symbol": symbol,
        "alert_entry": str(alert.get("entry", "")),
        "alert_timeframe": timeframe,
        "alert_target": alert.get("target") or "N/A",
        "alert_stop": alert.get("stop") or "N/A",
        "alert_rr": alert.get("rr") or "N/A",
        "alert_time": sent_at,
        "raw_message": raw_message,
    }
    return AlertNotification(subject=subject, body="\n".join(lines), fields=fields)


# ════════════════════════════════════════════════════════════════
# Transports
# ════════════════════════════════════════════════════════════════


class NotificationTransport(ABC):
    """
    Base class for one delivery backend.

    Subclasses implement is_configured() and send(); send() raises
    NotificationError when the backend does not accept the message.
    """

    name: str = "base"

    def __init__(self, config: NotificationConfig) -> None:
        self._config = config

    @abstractmethod
    def is_configured(self) -> bool:
        """True when every identifier the backend needs is present."""

    @abstractmethod
    async def send(self, client: httpx.AsyncClient, notification: AlertNotification) -> None:
        """Deliver the notification or raise NotificationError."""

    def _check(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        raise NotificationError(
            f"{self.name} returned HTTP {response.status_code}: {response.text[:200]}"
        )


class EmailJSTransport(NotificationTransport):
    """EmailJS REST API with a server-side template."""

    name = "emailjs"

    def is_configured(self) -> bool:
        c = self._config
        return bool(c.emailjs_service_id and c.emailjs_template_id and c.emailjs_user_id)

    async def send(self, client: httpx.AsyncClient, notification: AlertNotification) -> None:
        response = await client.post(
            EMAILJS_SEND_URL,
            json={
                "service_id": self._config.emailjs_service_id,
                "template_id": self._config.emailjs_template_id,
                "user_id": self._config.emailjs_user_id,
                "template_params": {
                    "to_email": self._config.recipient,
                    "subject": notification.subject,
                    **notification.fields,
                },
            },
        )
        self._check(response)


class FormspreeTransport(NotificationTransport):
    """Formspree form endpoint posting JSON."""

    name = "formspree"

    def is_configured(self) -> bool:
        return bool(self._config.formspree_form_id)

    async def send(self, client: httpx.AsyncClient, notification: AlertNotification) -> None:
        response = await client.post(
            FORMSPREE_URL_TEMPLATE.format(form_id=self._config.formspree_form_id),
            headers={"Accept": "application/json"},
            json={
                "email": self._config.recipient,
                "subject": notification.subject,
                "message": notification.body,
                "_replyto": self._config.recipient,
                "_subject": notification.subject,
            },
        )
        self._check(response)


class Web3FormsTransport(NotificationTransport):
    """Web3Forms submit endpoint posting form data."""

    name = "web3forms"

    def is_configured(self) -> bool:
        return bool(self._config.web3forms_access_key)

    async def send(self, client: httpx.AsyncClient, notification: AlertNotification) -> None:
        response = await client.post(
            WEB3FORMS_SUBMIT_URL,
            data={
                "access_key": self._config.web3forms_access_key,
                "email": self._config.recipient,
                "subject": notification.subject,
                "message": notification.body,
                "from_name": "TradingView Alert Relay",
            },
        )
        self._check(response)


TRANSPORT_TYPES: Dict[str, type] = {
    EmailJSTransport.name: EmailJSTransport,
    FormspreeTransport.name: FormspreeTransport,
    Web3FormsTransport.name: Web3FormsTransport,
}


# ════════════════════════════════════════════════════════════════
# Dispatcher
# ════════════════════════════════════════════════════════════════


class NotificationDispatcher:
    """
    PURPOSE: Deliver alert notifications through the first transport that works.

    Attributes:
        _config: Explicit notification configuration.
        _transports: Transports in the order they are tried.
        _http_transport: Optional httpx transport (MockTransport in tests).
        _sent / _failed: Delivery counters for the status endpoint.
    """

    def __init__(
        self,
        config: NotificationConfig,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._http_transport = http_transport
        self._transports: List[NotificationTransport] = []
        self._sent: int = 0
        self._failed: int = 0

        for name in config.transports:
            transport_type = TRANSPORT_TYPES.get(name)
            if transport_type is None:
                logger.warning("notification_transport_unknown", transport=name)
                continue
            self._transports.append(transport_type(config))

    @property
    def transport_names(self) -> List[str]:
        return [t.name for t in self._transports]

    async def notify(self, alert: Dict[str, Any]) -> bool:
        """
        PURPOSE: Try each configured transport until one delivers the alert.

        Args:
            alert: Stored alert in wire form.

        Returns:
            bool: True when a transport accepted the notification.
        """
        if not self._config.enabled:
            logger.debug("notifications_disabled", alert_id=alert.get("id"))
            return False

        candidates = [t for t in self._transports if t.is_configured()]
        if not self._config.recipient or not candidates:
            logger.warning(
                "notification_not_configured",
                alert_id=alert.get("id"),
                has_recipient=bool(self._config.recipient),
                transports=self.transport_names,
            )
            self._failed += 1
            return False

        notification = build_notification(alert)

        async with httpx.AsyncClient(
            timeout=self._config.timeout_seconds,
            transport=self._http_transport,
        ) as client:
            for transport in candidates:
                try:
                    await transport.send(client, notification)
                except (NotificationError, httpx.HTTPError) as e:
                    logger.warning(
                        "notification_transport_failed",
                        transport=transport.name,
                        alert_id=alert.get("id"),
                        error=str(e),
                        exception_type=type(e).__name__,
                    )
                    continue

                self._sent += 1
                logger.info(
                    "notification_sent",
                    transport=transport.name,
                    alert_id=alert.get("id"),
                    symbol=alert.get("symbol"),
                )
                return True

        self._failed += 1
        logger.error(
            "notification_all_transports_failed",
            alert_id=alert.get("id"),
            transports=[t.name for t in candidates],
        )
        return False

    def get_status(self) -> Dict[str, Any]:
        """Delivery counters and configuration summary."""
        return {
            "enabled": self._config.enabled,
            "transports": self.transport_names,
            "sent": self._sent,
            "failed": self._failed,
        }
