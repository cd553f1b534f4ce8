from __future__ import annotations

from datetime import date
from functools import lru_cache
import logging
import uuid

from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .errors import DataSourceUnavailable, EventNotFound, InvalidEventInput
from .models import (
    DaySchedule,
    EventDraftIn,
    EventOut,
    ErrorResponse,
    HealthResponse,
    MonthSummary,
    WeekSchedule,
)
from .service import CalendarService

logger = logging.getLogger(__name__)


@lru_cache
def get_service() -> CalendarService:
    settings = get_settings()
    return CalendarService(settings=settings)


def _error_response(request: Request, status_code: int, detail: str) -> JSONResponse:
    payload = ErrorResponse(detail=detail, request_id=getattr(request.state, "request_id", None))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


def create_app() -> FastAPI:
    settings: Settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

    app = FastAPI(
        title="Calendar Layout API",
        version="1.0.0",
        description="Day, week and month calendar layouts with overlap-free event columns.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["x-request-id"] = request_id
        return response

    @app.exception_handler(InvalidEventInput)
    async def invalid_event_exception_handler(request: Request, exc: InvalidEventInput):
        return _error_response(request, 422, str(exc))

    @app.exception_handler(EventNotFound)
    async def not_found_exception_handler(request: Request, exc: EventNotFound):
        return _error_response(request, 404, str(exc))

    @app.exception_handler(DataSourceUnavailable)
    async def data_source_exception_handler(request: Request, exc: DataSourceUnavailable):
        logger.error("Data source unavailable: %s", exc)
        return _error_response(request, 503, str(exc))

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", exc_info=exc)
        return _error_response(request, 500, "Internal server error.")

    @app.get("/")
    def root() -> dict[str, str]:
        return {"message": "Calendar Layout API", "docs": "/docs"}

    @app.get("/api/v1/health", response_model=HealthResponse)
    def health(service: CalendarService = Depends(get_service)) -> HealthResponse:
        return service.health()

    @app.get("/api/v1/events", response_model=list[EventOut])
    def list_events(service: CalendarService = Depends(get_service)) -> list[EventOut]:
        return service.list_events()

    @app.post("/api/v1/events", response_model=EventOut, status_code=201)
    def create_event(payload: EventDraftIn, service: CalendarService = Depends(get_service)) -> EventOut:
        return service.create_event(payload)

    @app.get("/api/v1/events/{event_id}", response_model=EventOut)
    def get_event(event_id: str, service: CalendarService = Depends(get_service)) -> EventOut:
        return service.get_event(event_id)

    @app.put("/api/v1/events/{event_id}", response_model=EventOut)
    def update_event(
        event_id: str,
        payload: EventDraftIn,
        service: CalendarService = Depends(get_service),
    ) -> EventOut:
        return service.update_event(event_id, payload)

    @app.delete("/api/v1/events/{event_id}", status_code=204)
    def delete_event(event_id: str, service: CalendarService = Depends(get_service)) -> Response:
        service.delete_event(event_id)
        return Response(status_code=204)

    @app.get("/api/v1/schedule/day", response_model=DaySchedule)
    def schedule_day(
        date_value: date = Query(alias="date"),
        ready: bool = Query(default=True),
        service: CalendarService = Depends(get_service),
    ) -> DaySchedule:
        return service.get_day_schedule(day_date=date_value, ready=ready)

    @app.get("/api/v1/schedule/week", response_model=WeekSchedule)
    def schedule_week(
        anchor_date: date = Query(),
        ready: bool = Query(default=True),
        service: CalendarService = Depends(get_service),
    ) -> WeekSchedule:
        return service.get_week_schedule(anchor_date=anchor_date, ready=ready)

    @app.get("/api/v1/schedule/month", response_model=MonthSummary)
    def schedule_month(
        anchor_date: date = Query(),
        ready: bool = Query(default=True),
        service: CalendarService = Depends(get_service),
    ) -> MonthSummary:
        return service.get_month_summary(anchor_date=anchor_date, ready=ready)

    return app


app = create_app()
