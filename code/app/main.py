from contextlib import asynccontextmanager
from typing import Callable, List, Optional

from fastapi import BackgroundTasks, FastAPI, Request

from app.core.config import configure_logging
from app.core.models import (
    AdvisorRequest,
    AdvisorResponse,
    FinancialContextModel,
    FinancialDataModel,
    InputsState,
    SimulateResponse,
    SimulationInputsModel,
    TimeSeriesPointModel,
    UsageModel,
)
from app.core.pipeline import DashboardSession
from app.core.store import default_store


def _default_session() -> DashboardSession:
    return DashboardSession(store=default_store())


def create_app(session_factory: Optional[Callable[[], DashboardSession]] = None) -> FastAPI:
    factory = session_factory or _default_session

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        session = factory().open()
        app.state.session = session
        try:
            yield
        finally:
            session.close()

    app = FastAPI(title="Financial Projection API", lifespan=lifespan)

    def session_of(request: Request) -> DashboardSession:
        return request.app.state.session

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/inputs", response_model=InputsState)
    def get_inputs(request: Request):
        session = session_of(request)
        return InputsState(
            inputs=SimulationInputsModel.from_inputs(session.inputs),
            organization_type=session.organization_type,
        )

    @app.put("/inputs", response_model=InputsState)
    async def put_inputs(payload: InputsState, request: Request):
        session = session_of(request)
        session.update_inputs(payload.inputs.to_inputs(), payload.organization_type)
        return InputsState(
            inputs=SimulationInputsModel.from_inputs(session.inputs),
            organization_type=session.organization_type,
        )

    @app.post("/simulate", response_model=SimulateResponse)
    async def simulate(request: Request, background_tasks: BackgroundTasks):
        session = session_of(request)
        results, records = session.run_simulation()
        background_tasks.add_task(session.persist, records)
        return SimulateResponse(
            results=FinancialDataModel.from_data(results),
            usage=UsageModel.from_stats(session.usage),
        )

    @app.post("/export", response_model=UsageModel)
    async def export(request: Request):
        return UsageModel.from_stats(session_of(request).export())

    @app.get("/usage", response_model=UsageModel)
    def usage(request: Request):
        return UsageModel.from_stats(session_of(request).usage)

    @app.get("/series", response_model=List[TimeSeriesPointModel])
    def series(request: Request):
        return [TimeSeriesPointModel.from_point(p) for p in session_of(request).series_snapshot()]

    @app.get("/context", response_model=FinancialContextModel)
    def context(request: Request):
        return FinancialContextModel.from_context(session_of(request).financial_context())

    @app.post("/advisor", response_model=AdvisorResponse)
    def advisor(payload: AdvisorRequest, request: Request):
        history = [m.model_dump() for m in payload.history]
        reply, source, ctx = session_of(request).ask_advisor(payload.question, history)
        return AdvisorResponse(reply=reply, source=source, context=FinancialContextModel.from_context(ctx))

    return app


app = create_app()
