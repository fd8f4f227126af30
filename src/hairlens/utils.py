from datetime import UTC, datetime


def now() -> datetime:
    return datetime.now(UTC)


def token_prefix(token: str) -> str:
    """Shorten a bearer token for log output."""
    return token[:8]


def truncate_to_millis(moment: datetime) -> datetime:
    """Drop sub-millisecond precision, matching what MongoDB stores."""
    return moment.replace(microsecond=moment.microsecond // 1000 * 1000)
