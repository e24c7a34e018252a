from datetime import datetime, timezone


def get_millis() -> int:
    return millis_for_time(datetime.now(timezone.utc))


def millis_for_time(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)
