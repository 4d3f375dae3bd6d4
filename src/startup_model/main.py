from __future__ import annotations

import logging
from typing import Dict

from fastapi import FastAPI, HTTPException

from .errors import CalculationError
from .models.scenario import ScenarioInput
from .schemas import (
    CapTableRequest,
    CapTableResponse,
    CashRunwayRequest,
    CashRunwayResponse,
    ExitScenarioRequest,
    ExitScenarioResponse,
    FinancialsRequest,
    FinancialsResponse,
    OpexProjectionRequest,
    OpexProjectionResponse,
    OpexSummaryRequest,
    OpexSummaryResponse,
    RevenueProjectionRequest,
    RevenueProjectionResponse,
    RevenueSummaryRequest,
    RevenueSummaryResponse,
    ScenarioCompareResponse,
    ScenarioCreateRequest,
    ScenarioCreateResponse,
    ScenarioListResponse,
    ScenarioRunRequest,
    ScenarioRunResponse,
)
from .services import cash, equity, financials, opex, revenue
from .services.calculator import ScenarioCalculator
from .services.personnel import default_personnel_roles

logger = logging.getLogger(__name__)

app = FastAPI(title="Startup Financial Model", version="0.1.0")

SCENARIOS: Dict[str, ScenarioInput] = {}
calculator = ScenarioCalculator()


def _unprocessable(exc: CalculationError) -> HTTPException:
    logger.info("rejected calculation: %s", exc)
    return HTTPException(status_code=422, detail=str(exc))


def _run(scenario: ScenarioInput) -> ScenarioRunResponse:
    try:
        result = calculator.run(scenario)
    except CalculationError as exc:
        raise _unprocessable(exc) from exc
    return ScenarioRunResponse(result=result)


@app.post("/scenarios", response_model=ScenarioCreateResponse)
def create_scenario(payload: ScenarioCreateRequest) -> ScenarioCreateResponse:
    scenario = payload.scenario
    if payload.clone_from:
        base = SCENARIOS.get(payload.clone_from)
        if base is None:
            raise HTTPException(status_code=404, detail=f"Scenario {payload.clone_from} not found")
        scenario = base.model_copy(update={"meta": scenario.meta})
    SCENARIOS[scenario.meta.id] = scenario
    return ScenarioCreateResponse(scenario_id=scenario.meta.id)


@app.get("/scenarios", response_model=ScenarioListResponse)
def list_scenarios() -> ScenarioListResponse:
    return ScenarioListResponse(scenarios=list(SCENARIOS.keys()))


@app.post("/run", response_model=ScenarioRunResponse)
def run_scenario(payload: ScenarioRunRequest) -> ScenarioRunResponse:
    scenario: ScenarioInput | None = None
    if payload.scenario is not None:
        scenario = payload.scenario
    elif payload.scenario_id:
        scenario = SCENARIOS.get(payload.scenario_id)
    if scenario is None:
        raise HTTPException(status_code=404, detail="Scenario not found")
    if payload.years:
        scenario = scenario.model_copy(update={"years": payload.years})
    return _run(scenario)


@app.get("/scenarios/{scenario_id}", response_model=ScenarioRunResponse)
def get_scenario_projection(scenario_id: str) -> ScenarioRunResponse:
    scenario = SCENARIOS.get(scenario_id)
    if scenario is None:
        raise HTTPException(status_code=404, detail="Scenario not found")
    return _run(scenario)


@app.get("/scenarios/{scenario_id}/compare", response_model=ScenarioCompareResponse)
def compare_scenarios(scenario_id: str, ids: str) -> ScenarioCompareResponse:
    base_ids = [scenario_id] + [part for part in ids.split(",") if part]
    final_arr = []
    ending_cash = []
    for _id in base_ids:
        scenario = SCENARIOS.get(_id)
        if scenario is None:
            raise HTTPException(status_code=404, detail=f"Scenario {_id} not found")
        result = _run(scenario).result
        final_arr.append(result.annual[-1].arr)
        ending_cash.append(result.annual[-1].ending_cash)
    return ScenarioCompareResponse(scenario_ids=base_ids, final_arr=final_arr, ending_cash=ending_cash)


@app.post("/revenue/summary", response_model=RevenueSummaryResponse)
def revenue_summary(payload: RevenueSummaryRequest) -> RevenueSummaryResponse:
    assumptions = payload.assumptions or revenue.default_revenue_assumptions()
    try:
        summary = revenue.revenue_summary(payload.years, assumptions)
        customers = revenue.customer_projections(payload.years, assumptions)
    except CalculationError as exc:
        raise _unprocessable(exc) from exc
    return RevenueSummaryResponse(summary=summary, customer_projections=customers, assumptions=assumptions)


@app.post("/revenue/projections", response_model=RevenueProjectionResponse)
def revenue_projections(payload: RevenueProjectionRequest) -> RevenueProjectionResponse:
    assumptions = payload.assumptions or revenue.default_revenue_assumptions()
    project = revenue.monthly_revenue_projections if payload.monthly else revenue.revenue_projections
    try:
        projections = project(payload.years, assumptions)
    except CalculationError as exc:
        raise _unprocessable(exc) from exc
    return RevenueProjectionResponse(projections=projections)


@app.post("/opex/projections", response_model=OpexProjectionResponse)
def opex_projections(payload: OpexProjectionRequest) -> OpexProjectionResponse:
    if payload.end_month < payload.start_month:
        raise HTTPException(status_code=400, detail="end_month must not precede start_month")
    roles = payload.roles if payload.roles is not None else default_personnel_roles()
    rounds = payload.rounds or None
    return OpexProjectionResponse(
        projections=opex.opex_projections(roles, payload.start_month, payload.end_month, rounds=rounds),
        average_monthly_opex=opex.average_monthly_opex(roles, payload.start_month, payload.end_month, rounds=rounds),
    )


@app.post("/opex/summary", response_model=OpexSummaryResponse)
def opex_summary(payload: OpexSummaryRequest) -> OpexSummaryResponse:
    roles = payload.roles if payload.roles is not None else default_personnel_roles()
    rounds = payload.rounds or None
    return OpexSummaryResponse(summaries=[opex.opex_summary(roles, month, rounds=rounds) for month in payload.months])


@app.post("/cash/runway", response_model=CashRunwayResponse)
def cash_runway(payload: CashRunwayRequest) -> CashRunwayResponse:
    assumptions = payload.assumptions or revenue.default_revenue_assumptions()
    roles = payload.roles if payload.roles is not None else default_personnel_roles()
    try:
        monthly_revenue = revenue.monthly_revenue_projections(payload.years, assumptions)
    except CalculationError as exc:
        raise _unprocessable(exc) from exc
    monthly_opex = opex.opex_projections(roles, 1, payload.years * 12)
    events = cash.funding_events_from_rounds(
        {"close_month": item.close_month, "amount_raised": item.amount} for item in payload.funding_rounds
    )
    positions = cash.cash_positions(monthly_revenue, monthly_opex, events, payload.starting_cash)
    return CashRunwayResponse(positions=positions, metrics=cash.burn_rate_metrics(positions))


@app.post("/equity/cap-table", response_model=CapTableResponse)
def cap_table(payload: CapTableRequest) -> CapTableResponse:
    try:
        history = equity.generate_cap_table_history(payload.founders, payload.esop_pool_size, payload.rounds)
    except CalculationError as exc:
        raise _unprocessable(exc) from exc
    return CapTableResponse(cap_table=history[-1].entries, history=history)


@app.post("/exit-scenarios", response_model=ExitScenarioResponse)
def exit_scenarios(payload: ExitScenarioRequest) -> ExitScenarioResponse:
    try:
        table = equity.generate_cap_table(payload.founders, payload.esop_pool_size, payload.rounds)
        scenarios = equity.exit_scenarios(
            payload.arr,
            payload.ebitda,
            table,
            payload.rounds,
            payload.exit.exit_year,
            multiples=payload.exit.multiples,
            method=payload.exit.method,
        )
    except CalculationError as exc:
        raise _unprocessable(exc) from exc
    return ExitScenarioResponse(
        exit_year=payload.exit.exit_year,
        arr=payload.arr,
        ebitda=payload.ebitda,
        scenarios=scenarios,
        cap_table=table,
    )


@app.post("/financials", response_model=FinancialsResponse)
def financial_statements(payload: FinancialsRequest) -> FinancialsResponse:
    statements = financials.generate_financial_statements(
        payload.years,
        payload.revenue,
        payload.opex,
        payload.funding,
        assumptions=payload.assumptions,
    )
    return FinancialsResponse(statements=statements)


@app.get("/health")
def healthcheck() -> Dict[str, str]:
    return {"status": "ok"}
