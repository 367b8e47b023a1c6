"""JSON and timestamp helpers shared by the SQLite stores."""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from typing import Any


def _default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, tuple)):
        return list(value)
    return str(value)


def to_json(value: Any) -> str:
    return json.dumps(value, default=_default, ensure_ascii=False)


def from_json(raw: str | None) -> Any:
    if raw is None:
        return None
    return json.loads(raw)


def to_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with fixed microsecond precision, so text order == time order."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)  # noqa: UP017
    return moment.astimezone(timezone.utc).isoformat(timespec="microseconds")  # noqa: UP017


def from_timestamp(raw: str) -> datetime:
    moment = datetime.fromisoformat(raw)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)  # noqa: UP017
    return moment
