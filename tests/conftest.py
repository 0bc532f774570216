"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from nutriwise.config import Settings
from nutriwise.containers import AppContainer
from nutriwise.errors import EstimatorError
from nutriwise.services.backup import BackupService
from nutriwise.services.chat import ChatService
from nutriwise.services.dashboard import DashboardService
from nutriwise.services.estimator import EstimatorClient, EstimatorService
from nutriwise.services.logs import LogService
from nutriwise.services.nutritionist import NutritionistClient, NutritionistService
from nutriwise.services.profile import ProfileService
from nutriwise.services.session import StateRepository, TrackerSession
from nutriwise.services.stats import StatsService

NOW = datetime(2024, 6, 12, 12, 0, tzinfo=UTC)


def millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


@dataclass
class FakeClock:
    """Clock returning a settable epoch-millisecond time."""

    now: int = field(default_factory=lambda: millis(NOW))

    def __call__(self) -> int:
        return self.now

    def advance(self, milliseconds: int) -> None:
        self.now += milliseconds


@dataclass
class InMemoryStateRepository(StateRepository):
    """In-memory blob storage for tests."""

    blobs: dict[str, str] = field(default_factory=dict)
    saves: list[str] = field(default_factory=list)

    def load_blob(self, name: str) -> str | None:
        return self.blobs.get(name)

    def save_blob(self, name: str, payload: str) -> None:
        self.blobs[name] = payload
        self.saves.append(name)


@dataclass
class FakeEstimatorClient(EstimatorClient):
    """Estimator client replaying scripted responses per action.

    Each scripted value is returned once, in order; exceptions are raised.
    Actions without a script fail with a permanent error.
    """

    script: dict[str, list[object]] = field(default_factory=dict)
    calls: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    def queue(self, action: str, *responses: object) -> None:
        self.script.setdefault(action, []).extend(responses)

    async def call(self, action: str, payload: dict[str, object]) -> object:
        self.calls.append((action, payload))
        responses = self.script.get(action)
        if not responses:
            raise EstimatorError("Estimator unavailable")
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def actions(self) -> list[str]:
        return [action for action, _ in self.calls]


@dataclass
class RecordingSleep:
    """Awaitable sleep replacement recording requested delays."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@dataclass
class FakeNutritionistClient(NutritionistClient):
    """Fake LLM returning fixed structured and text output."""

    json_payload: dict[str, object] = field(
        default_factory=lambda: {
            "items": [
                {
                    "name": "Oatmeal",
                    "quantityAmount": 1,
                    "quantityUnit": "bowl",
                    "calories": 150,
                    "protein": 5,
                    "carbs": 27,
                    "fat": 3,
                    "confidence": "high",
                    "notes": None,
                }
            ],
            "clarificationNeeded": False,
            "clarificationQuestion": None,
        }
    )
    text: str = "Nice balanced choice."
    error: Exception | None = None
    json_calls: list[dict[str, object]] = field(default_factory=list)
    text_calls: list[dict[str, object]] = field(default_factory=list)

    async def generate_json(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str | None,
        prompt: str,
        image_data_url: str | None,
        schema_name: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        if self.error is not None:
            raise self.error
        self.json_calls.append(
            {
                "prompt": prompt,
                "image_data_url": image_data_url,
                "schema_name": schema_name,
            }
        )
        return self.json_payload

    async def generate_text(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str | None,
        messages: list[dict[str, str]],
    ) -> str:
        if self.error is not None:
            raise self.error
        self.text_calls.append({"instructions": instructions, "messages": messages})
        return self.text


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        openai_api_key="openai-key",
        timezone="UTC",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def state_repository() -> InMemoryStateRepository:
    return InMemoryStateRepository()


@pytest.fixture
def session(state_repository: InMemoryStateRepository, clock: FakeClock) -> TrackerSession:
    return TrackerSession.load(state_repository, clock=clock)


@pytest.fixture
def estimator_client() -> FakeEstimatorClient:
    return FakeEstimatorClient()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def estimator_service(
    estimator_client: FakeEstimatorClient, sleep: RecordingSleep
) -> EstimatorService:
    return EstimatorService(client=estimator_client, sleep=sleep)


@pytest.fixture
def nutritionist_client() -> FakeNutritionistClient:
    return FakeNutritionistClient()


@pytest.fixture
def container(
    settings: Settings,
    session: TrackerSession,
    estimator_service: EstimatorService,
    nutritionist_client: FakeNutritionistClient,
) -> AppContainer:
    stats_service = StatsService(session, timezone_name=settings.timezone)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        session=session,
        estimator_service=estimator_service,
        log_service=LogService(session, estimator_service),
        profile_service=ProfileService(session),
        stats_service=stats_service,
        dashboard_service=DashboardService(stats_service),
        chat_service=ChatService(session, estimator_service),
        backup_service=BackupService(session),
        nutritionist_service=NutritionistService(
            client=nutritionist_client,
            model=settings.openai_model,
            reasoning_effort=settings.openai_reasoning_effort,
            store=settings.openai_store,
        ),
        close_resources=close_resources,
    )
