"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutriwise.adapters.estimator_client import HttpxEstimatorClient
from nutriwise.adapters.openai_nutritionist_client import OpenAINutritionistClient
from nutriwise.adapters.supabase_state_repository import SupabaseStateRepository
from nutriwise.config import Settings
from nutriwise.services.backup import BackupService
from nutriwise.services.chat import ChatService
from nutriwise.services.dashboard import DashboardService
from nutriwise.services.estimator import EstimatorService
from nutriwise.services.logs import LogService
from nutriwise.services.nutritionist import NutritionistService
from nutriwise.services.profile import ProfileService
from nutriwise.services.retry import RetryPolicy
from nutriwise.services.session import StateRepository, TrackerSession
from nutriwise.services.stats import StatsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session: TrackerSession
    estimator_service: EstimatorService
    log_service: LogService
    profile_service: ProfileService
    stats_service: StatsService
    dashboard_service: DashboardService
    chat_service: ChatService
    backup_service: BackupService
    nutritionist_service: NutritionistService
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None,
    state_repository: StateRepository | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    if state_repository is None:
        supabase_client = create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_service_key
        )
        state_repository = SupabaseStateRepository(supabase_client)
    session = TrackerSession.load(state_repository)
    estimator_client = HttpxEstimatorClient.create(resolved_settings.estimator_url)
    estimator_service = EstimatorService(
        client=estimator_client,
        retry_policy=RetryPolicy(
            initial_delay_seconds=resolved_settings.estimator_retry_delay_seconds
        ),
    )
    nutritionist_client = (
        OpenAINutritionistClient.create(resolved_settings.openai_api_key)
        if resolved_settings.openai_api_key
        else None
    )
    nutritionist_service = NutritionistService(
        client=nutritionist_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    stats_service = StatsService(session, timezone_name=resolved_settings.timezone)

    async def close_resources() -> None:
        await estimator_client.close()
        if nutritionist_client is not None:
            await nutritionist_client.client.close()

    return AppContainer(
        settings=resolved_settings,
        session=session,
        estimator_service=estimator_service,
        log_service=LogService(session, estimator_service),
        profile_service=ProfileService(session),
        stats_service=stats_service,
        dashboard_service=DashboardService(stats_service),
        chat_service=ChatService(session, estimator_service),
        backup_service=BackupService(session),
        nutritionist_service=nutritionist_service,
        close_resources=close_resources,
    )
