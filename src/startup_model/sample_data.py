from __future__ import annotations

from .models.common import ScenarioMeta
from .models.equity import EquityRound, ExitMethod, ExitSettings, FounderInput
from .models.financials import FinancialAssumptions
from .models.scenario import ScenarioInput
from .services.opex import default_funding_rounds
from .services.personnel import default_personnel_roles
from .services.revenue import default_revenue_assumptions


def build_sample_scenario() -> ScenarioInput:
    founders = [
        FounderInput(name="Founder 1", ownership=0.6),
        FounderInput(name="Founder 2", ownership=0.4),
    ]

    funding_rounds = [
        EquityRound(round_name="Pre-Seed", amount=1500000, post_money_valuation=7500000, close_month=3),
        EquityRound(
            round_name="Series A",
            amount=8000000,
            post_money_valuation=40000000,
            close_month=27,
            esop_refresh=0.15,
        ),
    ]

    exit_settings = ExitSettings(exit_year=7, arr_multiple=8.0, ebitda_multiple=15.0, method=ExitMethod.AVERAGE)

    scenario = ScenarioInput(
        meta=ScenarioMeta(id="sample-base", name="Base", description="Default assumptions"),
        years=10,
        starting_cash=0.0,
        revenue=default_revenue_assumptions(),
        personnel=default_personnel_roles(),
        opex_rounds=default_funding_rounds(),
        funding_rounds=funding_rounds,
        founders=founders,
        esop_pool_size=0.15,
        exit=exit_settings,
        financials=FinancialAssumptions(),
    )
    return scenario
