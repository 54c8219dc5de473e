"""Validity window and clean-up of generated QR codes.

A record is active until its stored ``expiry_time`` and expired from then on.
Nothing is written when a record expires; the state is derived from the clock.
Expired rows are removed by a best-effort sweep that only runs while some
client is running, so readers still dim expired rows they happen to see.
"""

import logging
import math
from datetime import datetime, timedelta, timezone


logger = logging.getLogger(__name__)

QR_VALIDITY = timedelta(hours=2)
SWEEP_INTERVAL_SECONDS = 60
REMINDER_WINDOW = timedelta(minutes=10)


def utcnow():
    return datetime.now(timezone.utc)


def to_iso(moment):
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")


def parse_timestamp(value):
    if isinstance(value, datetime):
        moment = value
    else:
        moment = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def compute_expiry(created_at):
    return created_at + QR_VALIDITY


def is_expired(record, now=None):
    now = now or utcnow()
    return now >= parse_timestamp(record["expiry_time"])


def minutes_remaining(record, now=None):
    """Whole minutes left before *record* expires, rounded up. 0 once expired."""
    now = now or utcnow()
    remaining = (parse_timestamp(record["expiry_time"]) - now).total_seconds()
    if remaining <= 0:
        return 0
    return math.ceil(remaining / 60)


def describe_time_left(record, now=None):
    if is_expired(record, now):
        return "Expired"
    return f"Expires in {minutes_remaining(record, now)} minutes"


def expiring_soon(records, now=None, window=REMINDER_WINDOW):
    now = now or utcnow()
    return [
        record for record in records
        if not is_expired(record, now) and parse_timestamp(record["expiry_time"]) - now <= window
    ]


def sweep(store, now=None):
    """Delete every record whose expiry time is strictly before *now*."""
    now = now or utcnow()
    removed = store.delete_where_expiry_before(now)
    if removed:
        logger.info("Expiry sweep removed %d QR code(s)", removed)
    return removed


def sweep_due(last_sweep, now=None, interval=SWEEP_INTERVAL_SECONDS):
    now = now or utcnow()
    return last_sweep is None or (now - last_sweep).total_seconds() >= interval
