"""Attendance analytics: per-activity rates, trend series and club roll-ups.

Everything here is a pure function over rows already fetched from storage.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import date_sort_key
from ..core.constants import DEFAULT_SESSION_TITLE, SUMMARY_RATE_DECIMALS, TREND_RATE_DECIMALS
from ..core.enums import ActivityKind
from .model import ActivityRef, AnalyticsResult, AttendanceRow, AttendanceSummary, TrendPoint


def percentage(part: int, whole: int, *, decimals: int = TREND_RATE_DECIMALS) -> float:
    """``part / whole * 100`` rounded half away from zero; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0.0
    exact = Decimal(part) * 100 / Decimal(whole)
    return float(exact.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP))


def _partition(rows: Iterable[AttendanceRow]) -> tuple[dict[str, list[AttendanceRow]], dict[str, list[AttendanceRow]], int]:
    by_session: dict[str, list[AttendanceRow]] = defaultdict(list)
    by_event: dict[str, list[AttendanceRow]] = defaultdict(list)
    malformed = 0

    for row in rows:
        has_session = row.session_id is not None
        has_event = row.event_id is not None
        if has_session == has_event:
            malformed += 1
        elif has_session:
            by_session[row.session_id].append(row)
        else:
            by_event[row.event_id].append(row)

    return by_session, by_event, malformed


def _trend_points(
    activities: Sequence[ActivityRef],
    buckets: dict[str, list[AttendanceRow]],
    kind: ActivityKind,
) -> tuple[list[TrendPoint], int, int]:
    points: list[TrendPoint] = []
    total_rows = 0
    total_present = 0

    for activity in activities:
        bucket = buckets.pop(activity.activity_id, None)
        if not bucket:
            continue

        present = sum(1 for r in bucket if r.attended)
        total = len(bucket)
        total_rows += total
        total_present += present

        title = activity.title
        if kind == ActivityKind.SESSION:
            title = title or DEFAULT_SESSION_TITLE

        points.append(
            TrendPoint(
                date=activity.date,
                title=title or "",
                kind=kind,
                rate=percentage(present, total),
                present=present,
                total=total,
            )
        )

    return points, total_rows, total_present


def aggregate(
    sessions: Sequence[ActivityRef],
    events: Sequence[ActivityRef],
    attendance_rows: Iterable[AttendanceRow],
    *,
    member_count: int = 0,
    session_count: Optional[int] = None,
    event_count: Optional[int] = None,
) -> AnalyticsResult:
    """Build the club analytics result.

    Activities with no attendance rows are left out of the trend series but still
    count towards ``session_count`` / ``event_count`` (which default to the number of
    activities passed in). Rows with both or neither foreign key set, or pointing
    at an activity that was not passed in, are skipped and reported through
    ``AnalyticsResult.skipped_rows``.
    """

    by_session, by_event, malformed = _partition(attendance_rows)

    session_points, session_rows, session_present = _trend_points(sessions, by_session, ActivityKind.SESSION)
    event_points, event_rows, event_present = _trend_points(events, by_event, ActivityKind.EVENT)

    # Whatever is left in the buckets did not match a known activity.
    orphans = sum(len(b) for b in by_session.values()) + sum(len(b) for b in by_event.values())

    # sorted() is stable: equal dates keep sessions-then-events input order.
    trend = sorted(session_points + event_points, key=lambda p: date_sort_key(p.date))

    total_rows = session_rows + event_rows
    total_present = session_present + event_present

    return AnalyticsResult(
        member_count=int(member_count),
        session_count=len(sessions) if session_count is None else int(session_count),
        event_count=len(events) if event_count is None else int(event_count),
        average_attendance=percentage(total_present, total_rows),
        trend_data=trend,
        skipped_rows=malformed + orphans,
    )


def summarize_attendance(rows: Sequence[AttendanceRow], *, marked: Optional[int] = None) -> AttendanceSummary:
    """Summary for one session's or event's attendance sheet."""
    total = len(rows)
    attended = sum(1 for r in rows if r.attended)
    return AttendanceSummary(
        total=total,
        total_marked=total if marked is None else int(marked),
        attended=attended,
        absent=total - attended,
        attendance_rate=percentage(attended, total, decimals=SUMMARY_RATE_DECIMALS),
    )
