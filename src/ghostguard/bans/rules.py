"""Pure helpers for ban input: duration specs, identifiers, evidence data URIs."""

import base64
import binascii
import re
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from ghostguard.common.models import as_utc, utcnow

PERMANENT_SPECS = frozenset({"p", "perm", "permanent"})
DURATION_PATTERN = re.compile(r"^(\d+)([mhd])$")
UNIT_DELTAS = {
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}
DATA_URI_PATTERN = re.compile(r"^data:(image/[a-zA-Z0-9.+-]+);base64,(.+)$", re.DOTALL)


def new_ban_id() -> str:
    return f"GG-{int(time.time() * 1000)}"


def parse_timestamp(value: Any) -> datetime | None:
    """Accept ISO strings, epoch milliseconds or datetimes; return aware UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=utcnow().tzinfo)
        except (OSError, OverflowError, ValueError) as exc:
            raise ValueError(f"epoch millis out of range: {value!r}") from exc
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return as_utc(datetime.fromisoformat(text))
    raise ValueError(f"unsupported timestamp {value!r}")


def compute_expires_at(
    duration: str | None,
    explicit_expires_at: Any = None,
    now: datetime | None = None,
) -> datetime | None:
    """Resolve a ban's expiry.

    An explicit expiry always wins. Otherwise ``P``/``perm``/``permanent`` and
    anything that is not ``<int>[mhd]`` mean permanent (None).
    """
    explicit = parse_timestamp(explicit_expires_at)
    if explicit is not None:
        return explicit

    raw = str(duration or "P").strip().lower()
    if raw in PERMANENT_SPECS:
        return None

    match = DURATION_PATTERN.match(raw)
    if not match:
        return None

    amount, unit = int(match.group(1)), match.group(2)
    return (now or utcnow()) + amount * UNIT_DELTAS[unit]


def normalize_identifiers(value: Any) -> list[str]:
    """Stringify, strip, drop blanks, dedupe (first occurrence kept)."""
    if not isinstance(value, list):
        return []
    cleaned = (str(x if x is not None else "").strip() for x in value)
    return list(dict.fromkeys(x for x in cleaned if x))


@dataclass(frozen=True)
class EvidenceImage:
    mime: str
    data: bytes

    @property
    def extension(self) -> str:
        return "png" if "png" in self.mime else "jpg"


def parse_data_uri(image_data: Any) -> EvidenceImage | None:
    """Decode ``data:image/<type>;base64,<payload>``; None when it does not match."""
    match = DATA_URI_PATTERN.match(str(image_data or ""))
    if not match:
        return None
    try:
        data = base64.b64decode(match.group(2))
    except (binascii.Error, ValueError):
        return None
    return EvidenceImage(mime=match.group(1), data=data)
