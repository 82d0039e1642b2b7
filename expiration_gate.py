import logging
from datetime import date, datetime, time
from pathlib import Path
from typing import Optional, Tuple, Union

from models import ExpirationPolicy, ExpirationStatus, GateDecision

logger = logging.getLogger(__name__)

# en-US layouts accepted for the baked-in expiration date
EXPIRATION_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %H:%M:%S",
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
)


def _as_datetime(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def parse_expiration(raw: Optional[str]) -> Tuple[ExpirationStatus, Optional[datetime]]:
    """Parse build metadata; never raises."""
    if raw is None or not str(raw).strip():
        return ExpirationStatus.MISSING, None

    text = str(raw).strip()
    for fmt in EXPIRATION_FORMATS:
        try:
            return ExpirationStatus.VALID, datetime.strptime(text, fmt)
        except ValueError:
            continue

    logger.warning("Unparsable build expiration date %r", text)
    return ExpirationStatus.MALFORMED, None


def override_present(app_dir: Path, marker: str = "NOEXPIRE") -> bool:
    """True when the override marker file sits beside the application."""
    return (Path(app_dir) / marker).is_file()


def load_policy(raw: Optional[str], app_dir: Path, marker: str = "NOEXPIRE") -> ExpirationPolicy:
    status, expiration_date = parse_expiration(raw)
    return ExpirationPolicy(
        expiration_date=expiration_date,
        status=status,
        override_present=override_present(app_dir, marker),
    )


def evaluate(
    expiration_date: Union[date, datetime],
    now: Union[date, datetime],
    override_present: bool,
) -> GateDecision:
    """
    Blocked iff now is past the expiration date and no override is present.

    A bare date compares as midnight at the start of that day.
    """
    if override_present:
        return GateDecision.ALLOWED
    if _as_datetime(now) > _as_datetime(expiration_date):
        return GateDecision.BLOCKED
    return GateDecision.ALLOWED


def check(policy: ExpirationPolicy, now: datetime, block_on_invalid: bool = True) -> GateDecision:
    """
    Apply a loaded policy.

    Missing or malformed metadata has no date to compare, so the outcome is
    the explicit ``block_on_invalid`` choice unless the override is present.
    """
    if policy.status != ExpirationStatus.VALID or policy.expiration_date is None:
        if policy.override_present:
            return GateDecision.ALLOWED
        logger.warning("Build expiration metadata is %s", policy.status.value)
        return GateDecision.BLOCKED if block_on_invalid else GateDecision.ALLOWED

    return evaluate(policy.expiration_date, now, policy.override_present)
