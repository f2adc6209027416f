"""Default pipeline stage definitions and ordering."""

from __future__ import annotations

from casedesk.core.config import settings


# Task-flow columns, in pipeline order
DEFAULT_STAGE_ORDER = [
    "Contact",
    "Pre-IC",
    "Doc collection",
    "Analysis",
    "ID call",
    "DIP",
    "Property search",
    "Property found",
    "FMA prep",
    "FMA",
    "Valuation",
    "Bank underwriter process",
    "Offer",
    "SL doc",
    "Rate Change",
    "Exchange",
    "Completion",
    "REMO",
]

# Default stage colors (blues early, greens once the offer is out)
DEFAULT_COLORS = {
    "Contact": "#3B82F6",  # Blue
    "Pre-IC": "#06B6D4",  # Cyan
    "Doc collection": "#0EA5E9",  # Sky
    "Analysis": "#6366F1",  # Indigo
    "ID call": "#8B5CF6",  # Violet
    "DIP": "#A855F7",  # Purple
    "Property search": "#F59E0B",  # Amber
    "Property found": "#F97316",  # Orange
    "FMA prep": "#14B8A6",  # Teal
    "FMA": "#0D9488",  # Teal
    "Valuation": "#059669",  # Emerald
    "Bank underwriter process": "#10B981",  # Green
    "Offer": "#22C55E",  # Green
    "SL doc": "#84CC16",  # Lime
    "Rate Change": "#EAB308",  # Yellow
    "Exchange": "#16A34A",  # Green
    "Completion": "#16A34A",  # Green (success)
    "REMO": "#64748B",  # Slate
}


def get_stage_order() -> list[str]:
    """Configured stage names in pipeline order."""
    return settings.pipeline_stages_list or list(DEFAULT_STAGE_ORDER)


def get_default_stage() -> str:
    """Initial status for new cases (first configured stage)."""
    return get_stage_order()[0]


def is_known_stage(status: str) -> bool:
    return status in get_stage_order()


def get_stage_defs() -> list[dict[str, object]]:
    """Generate pipeline stage definitions for the board header."""
    stages: list[dict[str, object]] = []
    for order, name in enumerate(get_stage_order(), start=1):
        stages.append(
            {
                "name": name,
                "order": order,
                "color": DEFAULT_COLORS.get(name, "#6B7280"),
            }
        )
    return stages
