from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from pomo_app.core.session_log import SessionLog, local_day


def _today(now: datetime | None) -> date:
    return local_day(now or datetime.now(tz=timezone.utc))


def day_label(day: date, today: date) -> str:
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{day.strftime('%b')} {day.day}, {day.year}"


def today_progress(log: SessionLog, now: datetime | None = None) -> dict[str, int] | None:
    """Today's counters, or None when nothing was completed today."""
    today = _today(now)
    if not any(local_day(record.completed_at) == today for record in log):
        return None
    return log.stats_for_day(today)


def summarize_sessions(log: SessionLog, now: datetime | None = None) -> dict:
    today = _today(now)
    days: list[dict] = []
    for day, records in log.group_by_day():
        stats = log.stats_for_day(day)
        days.append(
            {
                "date": day.isoformat(),
                "label": day_label(day, today),
                "focus_session_count": stats["focus_session_count"],
                "total_minutes": stats["total_minutes"],
                "sessions": [record.to_dict() for record in records],
            }
        )

    return {
        "generated_at": datetime.now(tz=timezone.utc).isoformat(),
        "total_sessions": len(log),
        "today": today_progress(log, now),
        "days": days,
    }
