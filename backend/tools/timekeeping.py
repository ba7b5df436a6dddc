"""Date & Time tools.

Dates are ISO strings (`YYYY-MM-DD`), datetimes ISO 8601 with an optional
offset. Zones are IANA names resolved through zoneinfo. Tools that depend on
the current time accept an optional `now` so results can be reproduced.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import calendar
import math

from tools.registry import register
from tools.inputs import get_bool, get_choice, get_int, get_list, get_str, round_to, table

SYNODIC_MONTH = 29.53058867
REFERENCE_NEW_MOON = datetime(2000, 1, 6, 18, 14, tzinfo=timezone.utc)
MOON_PHASES = [
    "New Moon", "Waxing Crescent", "First Quarter", "Waxing Gibbous",
    "Full Moon", "Waning Gibbous", "Last Quarter", "Waning Crescent",
]
MAX_DAY_OFFSET = 100000


def parse_date(value: Any, label: str = "date") -> date:
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    raise ValueError(f"Please enter a valid {label} (YYYY-MM-DD)")


def parse_datetime(value: Any, label: str = "date and time", tz=timezone.utc) -> datetime:
    """Parse an ISO datetime; naive values are read in `tz`."""
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Please enter a valid {label}")
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=tz)
        return parsed
    raise ValueError(f"Please enter a valid {label}")


def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown time zone: {name}")


def _now(inputs: Dict[str, Any]) -> datetime:
    if inputs.get("now"):
        return parse_datetime(inputs["now"], "current time")
    return datetime.now(timezone.utc)


def _today(inputs: Dict[str, Any], key: str = "as_of") -> date:
    if inputs.get(key):
        return parse_date(inputs[key])
    return _now(inputs).date()


def _offset_label(offset: timedelta) -> str:
    minutes = int(offset.total_seconds() // 60)
    sign = "+" if minutes >= 0 else "-"
    minutes = abs(minutes)
    return f"UTC{sign}{minutes // 60:02d}:{minutes % 60:02d}"


# ============================================================================
# Calendar arithmetic
# ============================================================================

def count_weekdays(start: date, end: date) -> int:
    """Weekdays in [start, end)."""
    if end <= start:
        return 0
    days = (end - start).days
    full_weeks, remainder = divmod(days, 7)
    count = full_weeks * 5
    for i in range(remainder):
        if (start + timedelta(days=full_weeks * 7 + i)).weekday() < 5:
            count += 1
    return count


def add_weekdays(start: date, days: int) -> date:
    step = 1 if days >= 0 else -1
    current = start
    remaining = abs(days)
    while remaining:
        current += timedelta(days=step)
        if current.weekday() < 5:
            remaining -= 1
    return current


@register("date-calculator")
def date_calculator(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    mode = get_choice(inputs, "mode", ("add", "subtract", "difference"), "add")
    start = parse_date(inputs.get("start_date"), "start date")

    if mode == "difference":
        end = parse_date(inputs.get("end_date"), "end date")
        lo, hi = sorted((start, end))
        return {
            "mode": mode,
            "days": (end - start).days,
            "weeks": round_to((end - start).days / 7),
            "weekdays": count_weekdays(lo, hi) * (1 if end >= start else -1),
        }

    days = get_int(inputs, "days", minimum=0, maximum=MAX_DAY_OFFSET)
    weekdays_only = get_bool(inputs, "weekdays_only", False)
    signed = days if mode == "add" else -days
    try:
        result = add_weekdays(start, signed) if weekdays_only else start + timedelta(days=signed)
    except OverflowError:
        raise ValueError("Resulting date is out of range")
    return {
        "mode": mode,
        "result_date": result.isoformat(),
        "weekday": calendar.day_name[result.weekday()],
        "weekdays_only": weekdays_only,
    }


@register("age-calculator")
def age_calculator(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    birth = parse_date(inputs.get("birth_date"), "birth date")
    today = _today(inputs)
    if birth > today:
        raise ValueError("Birth date cannot be in the future")

    years = today.year - birth.year
    months = today.month - birth.month
    days = today.day - birth.day
    if days < 0:
        months -= 1
        prev_month = today.month - 1 or 12
        prev_year = today.year if today.month > 1 else today.year - 1
        days += calendar.monthrange(prev_year, prev_month)[1]
    if months < 0:
        years -= 1
        months += 12

    def birthday_in(year: int) -> date:
        # Feb 29 birthdays fall on Feb 28 in common years
        if birth.month == 2 and birth.day == 29 and not calendar.isleap(year):
            return date(year, 2, 28)
        return date(year, birth.month, birth.day)

    next_birthday = birthday_in(today.year)
    if next_birthday < today:
        next_birthday = birthday_in(today.year + 1)

    return {
        "years": years,
        "months": months,
        "days": days,
        "total_days": (today - birth).days,
        "total_weeks": (today - birth).days // 7,
        "next_birthday": next_birthday.isoformat(),
        "days_until_birthday": (next_birthday - today).days,
    }


@register("day-finder")
def day_finder(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    target = parse_date(inputs.get("date"))
    iso_year, iso_week, _ = target.isocalendar()
    return {
        "date": target.isoformat(),
        "weekday": calendar.day_name[target.weekday()],
        "iso_week": iso_week,
        "iso_year": iso_year,
        "day_of_year": target.timetuple().tm_yday,
        "is_leap_year": calendar.isleap(target.year),
        "days_in_month": calendar.monthrange(target.year, target.month)[1],
    }


@register("moon-phase-viewer")
def moon_phase(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    when = parse_datetime(inputs["date"], "date") if inputs.get("date") else _now(inputs)

    elapsed = (when - REFERENCE_NEW_MOON).total_seconds() / 86400
    age = elapsed % SYNODIC_MONTH
    fraction = age / SYNODIC_MONTH
    illumination = (1 - math.cos(2 * math.pi * fraction)) / 2 * 100
    phase = MOON_PHASES[int(math.floor(fraction * 8 + 0.5)) % 8]

    half = SYNODIC_MONTH / 2
    to_full = half - age if age < half else SYNODIC_MONTH + half - age
    to_new = SYNODIC_MONTH - age

    return {
        "date": when.isoformat(),
        "age_days": round_to(age),
        "illumination": round_to(illumination, 1),
        "phase": phase,
        "next_full_moon": (when + timedelta(days=to_full)).isoformat(),
        "next_new_moon": (when + timedelta(days=to_new)).isoformat(),
    }


# ============================================================================
# Clocks & zones
# ============================================================================

@register("time-zone-converter")
def time_zone_converter(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    source = get_zone(get_str(inputs, "from_zone", required=True, label="a source time zone"))
    target = get_zone(get_str(inputs, "to_zone", required=True, label="a target time zone"))
    moment = parse_datetime(inputs.get("datetime"), tz=source).astimezone(source)

    converted = moment.astimezone(target)
    difference = converted.utcoffset() - moment.utcoffset()
    return {
        "source": {"zone": str(source), "datetime": moment.isoformat(), "offset": _offset_label(moment.utcoffset())},
        "target": {"zone": str(target), "datetime": converted.isoformat(), "offset": _offset_label(converted.utcoffset())},
        "offset_difference_hours": round_to(difference.total_seconds() / 3600),
    }


@register("world-clock")
def world_clock(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    zones = get_list(inputs, "zones") or ["UTC", "America/New_York", "Europe/London", "Asia/Kolkata", "Asia/Tokyo"]
    hour_format = get_choice(inputs, "format", ("12h", "24h"), "24h")
    now = _now(inputs)
    pattern = "%I:%M:%S %p" if hour_format == "12h" else "%H:%M:%S"

    clocks = []
    for name in zones:
        local = now.astimezone(get_zone(str(name)))
        clocks.append({
            "zone": str(name),
            "time": local.strftime(pattern),
            "date": local.date().isoformat(),
            "weekday": calendar.day_name[local.weekday()],
            "offset": _offset_label(local.utcoffset()),
        })
    return {"utc": now.astimezone(timezone.utc).isoformat(), "clocks": clocks}


@register("countdown-timer")
def countdown_timer(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    zone = get_zone(get_str(inputs, "zone", "UTC"))
    target = parse_datetime(inputs.get("target"), "target date and time", tz=zone)
    now = _now(inputs)

    remaining = max(0, int((target - now).total_seconds()))
    days, rest = divmod(remaining, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    return {
        "target": target.isoformat(),
        "days": days,
        "hours": hours,
        "minutes": minutes,
        "seconds": seconds,
        "total_seconds": remaining,
        "finished": remaining == 0,
    }


def format_duration(ms: int) -> str:
    hours, rest = divmod(ms, 3600000)
    minutes, rest = divmod(rest, 60000)
    seconds, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"


@register("stopwatch", exports=("csv",))
def stopwatch(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    laps = get_list(inputs, "laps", required=True)
    try:
        marks = [int(lap) for lap in laps]
    except (TypeError, ValueError):
        raise ValueError("Lap times must be whole milliseconds")
    if any(b < a for a, b in zip([0] + marks, marks)):
        raise ValueError("Lap times must be increasing")

    splits = [b - a for a, b in zip([0] + marks, marks)]
    rows = [[i + 1, format_duration(split), format_duration(total)] for i, (split, total) in enumerate(zip(splits, marks))]
    fastest = min(range(len(splits)), key=splits.__getitem__)
    slowest = max(range(len(splits)), key=splits.__getitem__)
    return {
        "splits": splits,
        "total_ms": marks[-1],
        "total": format_duration(marks[-1]),
        "fastest_lap": {"lap": fastest + 1, "ms": splits[fastest]},
        "slowest_lap": {"lap": slowest + 1, "ms": splits[slowest]},
        "table": table(["Lap", "Split", "Total"], rows),
    }


@register("pomodoro-timer", exports=("csv",))
def pomodoro_timer(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    work = get_int(inputs, "work_minutes", 25, minimum=1, maximum=180, label="work minutes")
    short_break = get_int(inputs, "short_break_minutes", 5, minimum=1, maximum=60, label="short break minutes")
    long_break = get_int(inputs, "long_break_minutes", 15, minimum=1, maximum=120, label="long break minutes")
    cycles = get_int(inputs, "cycles", 4, minimum=1, maximum=24)
    long_every = get_int(inputs, "long_break_every", 4, minimum=1, maximum=24, label="long break interval")

    sessions: List[Dict[str, Any]] = []
    clock = 0

    def add(kind: str, minutes: int):
        nonlocal clock
        sessions.append({"type": kind, "minutes": minutes, "start_minute": clock, "end_minute": clock + minutes})
        clock += minutes

    for cycle in range(1, cycles + 1):
        add("work", work)
        if cycle < cycles:
            if cycle % long_every == 0:
                add("long_break", long_break)
            else:
                add("short_break", short_break)

    focus = sum(s["minutes"] for s in sessions if s["type"] == "work")
    return {
        "sessions": sessions,
        "total_focus_minutes": focus,
        "total_break_minutes": clock - focus,
        "total_minutes": clock,
        "table": table(
            ["#", "Session", "Minutes", "Start", "End"],
            [[i + 1, s["type"], s["minutes"], s["start_minute"], s["end_minute"]] for i, s in enumerate(sessions)],
        ),
    }
