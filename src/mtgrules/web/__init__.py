"""Web API for the MTG rules lookup."""

from mtgrules.web.app import app
from mtgrules.web.models import (
    FilterOptionsResponse,
    HealthResponse,
    InitRulesRequest,
    InitRulesResponse,
    RuleModel,
    SearchRequest,
    SearchResponse,
    StatsResponse,
)

__all__ = [
    "app",
    "FilterOptionsResponse",
    "HealthResponse",
    "InitRulesRequest",
    "InitRulesResponse",
    "RuleModel",
    "SearchRequest",
    "SearchResponse",
    "StatsResponse",
]
