from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from travel_companion.agents.budget_planner import split_budget
from travel_companion.schemas import BudgetBreakdown, BudgetRequest

router = APIRouter(tags=["misc"])


@router.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@router.get("/config/identity")
async def identity_config(request: Request) -> Dict[str, Any]:
    """Client bootstrap settings for the identity provider (public values only)."""
    return request.app.state.settings.identity_client_config


@router.post("/budget/optimize")
async def optimize_budget(payload: BudgetRequest) -> Dict[str, Any]:
    return BudgetBreakdown(**split_budget(payload.budget)).model_dump(by_alias=True)
