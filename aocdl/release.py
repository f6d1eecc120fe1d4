import logging
import random
import sys
import time
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Final, TextIO

from .settings import Settings

DEFAULT_OUTPUT: Final = "input.txt"

MIN_DELAY: Final = timedelta(milliseconds=2000)
MAX_DELAY: Final = timedelta(milliseconds=30000)

COARSE_POLL: Final = 0.2
FINE_POLL: Final = 0.02

logger = logging.getLogger(__name__)


# Puzzles unlock at midnight EST; the site does not follow daylight saving.
AOC_TZ: Final = timezone(timedelta(hours=-5), "EST")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def next_release(now: datetime) -> datetime:
    local = now.astimezone(AOC_TZ)
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight + timedelta(days=1)


def resolve_defaults(
    settings: Settings, now: datetime | None = None
) -> tuple[Settings, datetime]:
    """Fill in year, day and output, returning them with the next release."""
    if now is None:
        now = utc_now()
    local = now.astimezone(AOC_TZ)
    upcoming = next_release(now)

    if settings.wait:
        # Waiting always targets the upcoming puzzle.
        year, day = upcoming.year, upcoming.day
    else:
        year = settings.year or local.year
        day = settings.day or local.day

    resolved = replace(
        settings, year=year, day=day, output=settings.output or DEFAULT_OUTPUT
    )
    logger.info(
        "Resolved year=%s day=%s output=%s", resolved.year, resolved.day, resolved.output
    )
    return resolved, upcoming


def random_delay(rng: random.Random | None = None) -> timedelta:
    low = int(MIN_DELAY / timedelta(milliseconds=1))
    high = int(MAX_DELAY / timedelta(milliseconds=1))
    millis = (rng or random).randint(low, high)
    return timedelta(milliseconds=millis)


def _seconds(delta: timedelta) -> float:
    return delta / timedelta(milliseconds=1) / 1000.0


def wait(
    target: datetime,
    delay: timedelta | None = None,
    *,
    clock: Callable[[], datetime] = utc_now,
    sleep: Callable[[float], None] = time.sleep,
    out: TextIO | None = None,
) -> None:
    """Block until ``target + delay`` while drawing a countdown.

    The countdown first shows the time left until ``target`` itself, then
    the jitter left over after it. There is no way to cancel the wait short
    of killing the process.
    """
    if delay is None:
        delay = random_delay()
    if out is None:
        out = sys.stdout

    logger.info("Waiting until %s plus %.1fs", target.isoformat(), _seconds(delay))

    shown = None
    remaining = target - clock()
    while remaining >= timedelta(0):
        # round up to the next whole second
        total = int((remaining + timedelta(seconds=1)).total_seconds())
        hms = (total // 3600 % 24, total // 60 % 60, total % 60)
        if hms != shown:
            shown = hms
            out.write("\r%02d:%02d:%02d + %04.1fs" % (*hms, _seconds(delay)))
            out.flush()
        sleep(COARSE_POLL)
        remaining = target - clock()

    deadline = target + delay
    shown_millis = None
    remaining = deadline - clock()
    while remaining >= timedelta(0):
        millis = int(remaining / timedelta(milliseconds=1))
        if millis != shown_millis:
            shown_millis = millis
            out.write("\r00:00:00 + %04.1fs" % (millis / 1000.0))
            out.flush()
        sleep(FINE_POLL)
        remaining = deadline - clock()

    out.write("\r                \r")
    out.flush()
