"""
PURPOSE: Time helpers shared by alert id generation, event payloads and status endpoints.
"""

from datetime import datetime, timezone


def get_utc_now() -> datetime:
    """
    PURPOSE: Return the current UTC time as a timezone-aware datetime object.

    Returns:
        datetime: Current UTC time with timezone info.
    """
    return datetime.now(timezone.utc)


def get_epoch_ms(moment: datetime | None = None) -> int:
    """
    PURPOSE: Milliseconds since the Unix epoch for the given (or current) moment.

    Args:
        moment: Timezone-aware datetime; defaults to now.

    Returns:
        int: Epoch milliseconds.
    """
    moment = moment or get_utc_now()
    return int(moment.timestamp() * 1000)

