"""Dashboard view: today's totals, training load, targets and trend."""

from dataclasses import dataclass
from datetime import date

from nutriwise.domain.logs import LogEntry
from nutriwise.domain.stats import DailyTotals, TrendPoint
from nutriwise.domain.targets import TargetResult
from nutriwise.services.stats import StatsService
from nutriwise.services.targets import compute_targets
from nutriwise.services.training import detect_training_load


@dataclass(frozen=True)
class Dashboard:
    """Derived metrics for one day, recomputed from the current log store."""

    totals: DailyTotals
    training_load: bool
    targets: TargetResult
    remaining_calories: float
    trend: list[TrendPoint]
    entries: list[LogEntry]


@dataclass
class DashboardService:
    """Runs aggregation, detection and target computation on demand."""

    stats_service: StatsService

    def get_dashboard(self, today: date | None = None) -> Dashboard:
        """Return the dashboard for today (or the given local day)."""
        day = today or self.stats_service.today()
        entries = self.stats_service.entries_for_day(day)
        totals = self.stats_service.get_day(day)
        training_load = detect_training_load(entries)
        targets = compute_targets(self.stats_service.session.profile, training_load)
        return Dashboard(
            totals=totals,
            training_load=training_load,
            targets=targets,
            remaining_calories=targets.calorie_target - totals.calories + totals.burned,
            trend=self.stats_service.get_trend(day),
            entries=sorted(entries, key=lambda entry: entry.timestamp, reverse=True),
        )
