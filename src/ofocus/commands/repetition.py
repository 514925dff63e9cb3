"""Repetition rule rendering for AppleScript."""

from __future__ import annotations

from ofocus.commands.models import RepetitionRule

_FREQUENCIES = {
    "daily": "DAILY",
    "weekly": "WEEKLY",
    "monthly": "MONTHLY",
    "yearly": "YEARLY",
}
_WEEKDAYS = ("SU", "MO", "TU", "WE", "TH", "FR", "SA")


def build_rrule(rule: RepetitionRule) -> str:
    """Render a validated rule as an iCalendar RRULE string."""

    parts = [f"FREQ={_FREQUENCIES[rule.frequency]}"]
    if rule.interval > 1:
        parts.append(f"INTERVAL={int(rule.interval)}")
    if rule.days_of_week:
        parts.append("BYDAY=" + ",".join(_WEEKDAYS[int(day)] for day in rule.days_of_week))
    if rule.day_of_month is not None:
        parts.append(f"BYMONTHDAY={int(rule.day_of_month)}")
    return ";".join(parts)


def repetition_rule_script(task_var: str, rule: RepetitionRule) -> str:
    method = "due again" if rule.repeat_method == "due-again" else "defer another"
    return (
        f"set repetition rule of {task_var} to "
        f'{{repetition method:{method}, recurrence:"{build_rrule(rule)}"}}'
    )


def clear_repetition_script(task_var: str) -> str:
    return f"set repetition rule of {task_var} to missing value"
