from __future__ import annotations

import logging
from collections import defaultdict, deque
from typing import Deque, Dict, List, Optional, Sequence, Tuple

from ..errors import DegenerateDilution, DegenerateReturns, InvalidAssumptions
from ..models.equity import (
    CapTableEntry,
    CapTableSnapshot,
    DilutionResult,
    EquityRound,
    ESOPPool,
    ESOPRefreshResult,
    ExitMethod,
    ExitReturns,
    ExitScenario,
    FounderEquity,
    FounderInput,
    InitialCapTable,
    RoundReturn,
    StakeholderType,
)
from .numeric import round_half_up

logger = logging.getLogger(__name__)

AUTHORIZED_SHARES = 10_000_000
ESOP_POOL_NAME = "ESOP Pool"
OWNERSHIP_TOLERANCE = 1e-6
DEFAULT_EXIT_MULTIPLES = (2, 3, 5, 6, 8, 10, 15, 20, 25)

_ESOP_TYPES = (StakeholderType.ESOP, StakeholderType.ESOP_REFRESH)


def initialize_cap_table(
    founders: Sequence[FounderInput],
    esop_pool_size: float,
    authorized_shares: int = AUTHORIZED_SHARES,
) -> InitialCapTable:
    """Carve the ESOP out of founder equity.

    Founder fractions describe the split of the founders' share and must add
    up to 1, so founders plus pool always close at exactly 100%.
    """
    if not 0 <= esop_pool_size < 1:
        raise InvalidAssumptions(f"esop_pool_size must be in [0, 1), got {esop_pool_size}")
    founder_total = sum(founder.ownership for founder in founders)
    if abs(founder_total - 1.0) > OWNERSHIP_TOLERANCE:
        raise InvalidAssumptions(f"founder ownership must add up to 1.0, got {founder_total}")

    founder_share = 1 - esop_pool_size
    founder_rows = []
    for founder in founders:
        ownership = founder.ownership * founder_share
        founder_rows.append(
            FounderEquity(
                name=founder.name,
                initial_ownership=ownership,
                current_ownership=ownership,
                shares=round_half_up(authorized_shares * ownership),
            )
        )
    esop_shares = round_half_up(authorized_shares * esop_pool_size)
    return InitialCapTable(
        founders=founder_rows,
        esop=ESOPPool(pool_size=esop_pool_size, allocated=0.0, available=esop_pool_size, shares=esop_shares),
        total_shares=sum(row.shares for row in founder_rows) + esop_shares,
    )


def _dilute(cap_table: Sequence[CapTableEntry], factor: float) -> List[CapTableEntry]:
    return [entry.model_copy(update={"ownership": entry.ownership * factor}) for entry in cap_table]


def total_shares(cap_table: Sequence[CapTableEntry]) -> int:
    return sum(entry.shares for entry in cap_table)


def calculate_funding_round_dilution(
    cap_table: Sequence[CapTableEntry],
    amount: float,
    post_money_valuation: float,
) -> DilutionResult:
    if post_money_valuation <= 0:
        raise DegenerateDilution(f"post-money valuation must be positive, got {post_money_valuation}")
    if amount < 0:
        raise DegenerateDilution(f"round amount cannot be negative, got {amount}")
    if amount >= post_money_valuation:
        raise DegenerateDilution("round amount must be below the post-money valuation")

    current_shares = total_shares(cap_table)
    if current_shares <= 0:
        raise DegenerateDilution("cap table has no shares to price the round against")

    new_investor_ownership = amount / post_money_valuation
    dilution_factor = 1 - new_investor_ownership
    shares_after = current_shares / dilution_factor
    return DilutionResult(
        new_investor_ownership=new_investor_ownership,
        dilution_factor=dilution_factor,
        price_per_share=post_money_valuation / shares_after,
        shares_issued=round_half_up(shares_after - current_shares),
        updated_cap_table=_dilute(cap_table, dilution_factor),
    )


def esop_ownership(cap_table: Sequence[CapTableEntry]) -> float:
    return sum(entry.ownership for entry in cap_table if entry.type in _ESOP_TYPES)


def calculate_esop_refresh(
    cap_table: Sequence[CapTableEntry],
    target_pool_size: float,
    round_name: Optional[str] = None,
) -> ESOPRefreshResult:
    """Top the option pool back up to ``target_pool_size``.

    The new grant dilutes every holder, the existing pool included, so the
    refresh stake x solves current * (1 - x) + x = target.
    """
    if not 0 <= target_pool_size < 1:
        raise DegenerateDilution(f"target pool size must be in [0, 1), got {target_pool_size}")
    current = esop_ownership(cap_table)
    if current >= target_pool_size:
        return ESOPRefreshResult(refresh_ownership=0.0, refresh_shares=0, updated_cap_table=list(cap_table))

    refresh_ownership = (target_pool_size - current) / (1 - current)
    current_shares = total_shares(cap_table)
    refresh_shares = round_half_up(current_shares / (1 - refresh_ownership) - current_shares)
    updated = _dilute(cap_table, 1 - refresh_ownership)
    updated.append(
        CapTableEntry(
            stakeholder=f"{round_name} ESOP Refresh" if round_name else "ESOP Refresh",
            type=StakeholderType.ESOP_REFRESH,
            shares=refresh_shares,
            ownership=refresh_ownership,
            round_name=round_name,
        )
    )
    return ESOPRefreshResult(refresh_ownership=refresh_ownership, refresh_shares=refresh_shares, updated_cap_table=updated)


def generate_cap_table_history(
    founders: Sequence[FounderInput],
    esop_pool_size: float,
    rounds: Sequence[EquityRound],
    authorized_shares: int = AUTHORIZED_SHARES,
) -> List[CapTableSnapshot]:
    """Fold the rounds over the initial table, in the order given."""
    cap_table = initialize_cap_table(founders, esop_pool_size, authorized_shares).entries(ESOP_POOL_NAME)
    history = [CapTableSnapshot(stage="Initial", entries=cap_table)]
    for funding_round in rounds:
        dilution = calculate_funding_round_dilution(cap_table, funding_round.amount, funding_round.post_money_valuation)
        cap_table = dilution.updated_cap_table + [
            CapTableEntry(
                stakeholder=f"{funding_round.round_name} Investors",
                type=StakeholderType.INVESTOR,
                shares=dilution.shares_issued,
                ownership=dilution.new_investor_ownership,
                round_name=funding_round.round_name,
            )
        ]
        history.append(CapTableSnapshot(stage=funding_round.round_name, entries=cap_table))

        if funding_round.esop_refresh is not None:
            refresh = calculate_esop_refresh(cap_table, funding_round.esop_refresh, funding_round.round_name)
            if refresh.refresh_ownership > 0:
                cap_table = refresh.updated_cap_table
                history.append(CapTableSnapshot(stage=f"{funding_round.round_name} ESOP Refresh", entries=cap_table))
    logger.debug("cap table folded over %d round(s), %d snapshot(s)", len(rounds), len(history))
    return history


def generate_cap_table(
    founders: Sequence[FounderInput],
    esop_pool_size: float,
    rounds: Sequence[EquityRound],
    authorized_shares: int = AUTHORIZED_SHARES,
) -> List[CapTableEntry]:
    return generate_cap_table_history(founders, esop_pool_size, rounds, authorized_shares)[-1].entries


def calculate_exit_valuation(
    arr: float,
    ebitda: float,
    arr_multiple: float,
    ebitda_multiple: float,
    method: ExitMethod = ExitMethod.AVERAGE,
) -> float:
    arr_valuation = arr * arr_multiple
    ebitda_valuation = ebitda * ebitda_multiple
    if method == ExitMethod.ARR:
        return arr_valuation
    if method == ExitMethod.EBITDA:
        return ebitda_valuation
    return (arr_valuation + ebitda_valuation) / 2


def calculate_exit_returns(
    exit_year: int,
    exit_valuation: float,
    investment: float,
    ownership: float,
    investment_year: int = 1,
) -> ExitReturns:
    if investment <= 0:
        raise DegenerateReturns(f"investment must be positive, got {investment}")
    equity_value = exit_valuation * ownership
    roi = equity_value / investment
    years_held = exit_year - investment_year
    if years_held > 0 and roi > 0:
        cagr = (roi ** (1 / years_held) - 1) * 100
    elif years_held > 0:
        # total loss
        cagr = -100.0
    else:
        cagr = 0.0
    return ExitReturns(equity_value=equity_value, roi=roi, roi_percent=(roi - 1) * 100, cagr=cagr)


def exit_scenarios(
    arr: float,
    ebitda: float,
    cap_table: Sequence[CapTableEntry],
    rounds: Sequence[EquityRound],
    exit_year: int,
    multiples: Sequence[float] = DEFAULT_EXIT_MULTIPLES,
    method: ExitMethod = ExitMethod.AVERAGE,
) -> List[ExitScenario]:
    """Investor returns per round across a grid of exit multiples.

    The same multiple is applied to ARR and EBITDA. Rounds without an
    investment amount have no defined return and are left out. Investor
    entries are matched to rounds in order, so tranches sharing a name each
    keep their own stake.
    """
    stakes_by_round: Dict[str, Deque[float]] = defaultdict(deque)
    for entry in cap_table:
        if entry.type == StakeholderType.INVESTOR and entry.round_name is not None:
            stakes_by_round[entry.round_name].append(entry.ownership)

    priced_rounds: List[Tuple[EquityRound, float]] = []
    for funding_round in rounds:
        stakes = stakes_by_round.get(funding_round.round_name)
        ownership = stakes.popleft() if stakes else 0.0
        if funding_round.amount > 0:
            priced_rounds.append((funding_round, ownership))
    if len(priced_rounds) < len(rounds):
        logger.warning("skipping %d round(s) with no investment in exit scenarios", len(rounds) - len(priced_rounds))

    scenarios: List[ExitScenario] = []
    for multiple in multiples:
        exit_valuation = calculate_exit_valuation(arr, ebitda, multiple, multiple, method)
        round_returns = []
        for funding_round, ownership in priced_rounds:
            returns = calculate_exit_returns(
                exit_year,
                exit_valuation,
                funding_round.amount,
                ownership,
                funding_round.close_year,
            )
            round_returns.append(
                RoundReturn(
                    round_name=funding_round.round_name,
                    investment=funding_round.amount,
                    equity_ownership=ownership,
                    **returns.model_dump(),
                )
            )
        scenarios.append(
            ExitScenario(
                multiple=multiple,
                arr_multiple=multiple,
                ebitda_multiple=multiple,
                exit_valuation=exit_valuation,
                round_returns=round_returns,
            )
        )
    return scenarios
