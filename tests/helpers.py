from datetime import datetime, timezone


def utc_ts(*args) -> int:
    """Epoch seconds for a UTC datetime(*args)."""
    return int(datetime(*args, tzinfo=timezone.utc).timestamp())
