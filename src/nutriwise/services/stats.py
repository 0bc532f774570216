"""Daily aggregation, trend window and history grouping over the log store."""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from nutriwise.domain.logs import ExerciseEntry, FoodEntry, LogEntry
from nutriwise.domain.stats import DailyTotals, TrendPoint
from nutriwise.services.session import TrackerSession

TREND_DAYS = 7
_WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


@dataclass
class StatsService:
    """Service for computing day totals in the configured timezone."""

    session: TrackerSession
    timezone_name: str = "UTC"

    @property
    def tz(self) -> ZoneInfo:
        """Timezone that defines day boundaries."""
        return ZoneInfo(self.timezone_name)

    def today(self) -> date:
        """Return the current local date."""
        return datetime.now(tz=self.tz).date()

    def entries_for_day(self, day: date | None = None) -> list[LogEntry]:
        """Return entries logged on a local day, in store order."""
        target = day or self.today()
        return [
            entry
            for entry in self.session.logs
            if entry_day(entry, self.tz) == target
        ]

    def get_day(self, day: date | None = None) -> DailyTotals:
        """Return totals for a local day (today by default)."""
        target = day or self.today()
        return aggregate_day(self.session.logs, target, self.tz)

    def get_trend(self, today: date | None = None) -> list[TrendPoint]:
        """Return the 7-day food calorie trend ending today."""
        return trend_window(self.session.logs, today or self.today(), self.tz)

    def get_history(self) -> list[tuple[date, list[LogEntry]]]:
        """Return entries grouped by local day, newest day and entry first."""
        return group_by_day(self.session.logs, self.tz)


def entry_day(entry: LogEntry, tz: ZoneInfo) -> date:
    """Return the local calendar day an entry belongs to."""
    return datetime.fromtimestamp(entry.timestamp / 1000, tz=tz).date()


def food_calories(entry: LogEntry) -> float:
    """Return the summed item calories of a food entry, zero otherwise."""
    if isinstance(entry, FoodEntry):
        return sum(item.calories for item in entry.items)
    return 0.0


def aggregate_day(entries: Iterable[LogEntry], day: date, tz: ZoneInfo) -> DailyTotals:
    """Sum food macros and exercise burn for entries on a local day."""
    calories = protein = carbs = fat = burned = 0.0
    for entry in entries:
        if entry_day(entry, tz) != day:
            continue
        if isinstance(entry, FoodEntry):
            for item in entry.items:
                calories += item.calories
                protein += item.protein
                carbs += item.carbs
                fat += item.fat
        elif isinstance(entry, ExerciseEntry):
            burned += entry.exercise.calories_burned
    return DailyTotals(
        day=day,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
        burned=burned,
    )


def trend_window(
    entries: Iterable[LogEntry], today: date, tz: ZoneInfo
) -> list[TrendPoint]:
    """Return exactly seven daily food calorie points, oldest first."""
    start = today - timedelta(days=TREND_DAYS - 1)
    by_day: dict[date, float] = defaultdict(float)
    for entry in entries:
        if not isinstance(entry, FoodEntry):
            continue
        day = entry_day(entry, tz)
        if start <= day <= today:
            by_day[day] += food_calories(entry)
    points = []
    for offset in range(TREND_DAYS):
        day = start + timedelta(days=offset)
        points.append(
            TrendPoint(
                day=day,
                label=_WEEKDAY_LABELS[day.weekday()],
                calories=by_day.get(day, 0.0),
            )
        )
    return points


def group_by_day(
    entries: Iterable[LogEntry], tz: ZoneInfo
) -> list[tuple[date, list[LogEntry]]]:
    """Group entries by local day; days and entries newest first."""
    groups: dict[date, list[LogEntry]] = defaultdict(list)
    for entry in entries:
        groups[entry_day(entry, tz)].append(entry)
    return [
        (day, sorted(groups[day], key=lambda entry: entry.timestamp, reverse=True))
        for day in sorted(groups, reverse=True)
    ]
