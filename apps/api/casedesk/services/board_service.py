"""Board projection - per-column ordered case lists for the task-flow board."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Sequence

from casedesk.core.stage_definitions import get_stage_order
from casedesk.db.enums import UrgencyTier
from casedesk.db.models import Case
from casedesk.services.urgency_service import (
    UrgencyPolicy,
    classify_deadline,
    day_offset,
    get_policy,
)


@dataclass
class BoardCard:
    case: Case
    urgency: UrgencyTier
    days_until_deadline: int | None


@dataclass
class BoardColumn:
    stage: str
    cards: list[BoardCard] = field(default_factory=list)
    is_configured: bool = True


def _sort_key(case: Case, today: date, policy: UrgencyPolicy) -> tuple[int, float]:
    # Overdue first, then nearest deadline; no deadline sorts last
    is_overdue = classify_deadline(case.deadline, today, policy) == UrgencyTier.OVERDUE
    offset = day_offset(case.deadline, today)
    return (0 if is_overdue else 1, math.inf if offset is None else offset)


def column_cases(
    cases: Iterable[Case],
    status: str,
    today: date | None = None,
    policy: UrgencyPolicy | None = None,
) -> list[Case]:
    """
    Cases in one board column, most urgent first.

    Exact status match; sorted() is stable so ties keep input order.
    """
    today = today or date.today()
    policy = policy or get_policy()
    in_column = [c for c in cases if c.status == status]
    return sorted(in_column, key=lambda c: _sort_key(c, today, policy))


def build_column(
    cases: Iterable[Case],
    status: str,
    today: date | None = None,
    policy: UrgencyPolicy | None = None,
    is_configured: bool = True,
) -> BoardColumn:
    today = today or date.today()
    policy = policy or get_policy()
    return BoardColumn(
        stage=status,
        is_configured=is_configured,
        cards=[
            BoardCard(
                case=c,
                urgency=classify_deadline(c.deadline, today, policy),
                days_until_deadline=day_offset(c.deadline, today),
            )
            for c in column_cases(cases, status, today, policy)
        ],
    )


def build_board(
    cases: Sequence[Case],
    stages: Sequence[str] | None = None,
    today: date | None = None,
    policy: UrgencyPolicy | None = None,
) -> list[BoardColumn]:
    """
    All board columns in stage order.

    Cases whose status is not a configured stage get trailing ad-hoc
    columns (first-seen order) so they stay visible.
    """
    today = today or date.today()
    policy = policy or get_policy()
    stages = list(stages) if stages is not None else get_stage_order()

    columns = [build_column(cases, s, today, policy) for s in stages]

    known = set(stages)
    extra: list[str] = []
    for c in cases:
        if c.status not in known and c.status not in extra:
            extra.append(c.status)
    columns.extend(
        build_column(cases, s, today, policy, is_configured=False) for s in extra
    )
    return columns
