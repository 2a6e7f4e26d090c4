"""FastAPI application for the MTG rules lookup API."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Union

from fastapi import FastAPI, HTTPException

from mtgrules.core import KeyValueStore, get_settings, get_store
from mtgrules.search import RulesSearchEngine, build_index
from mtgrules.web.models import (
    CategoriesResponse,
    CategoryModel,
    CategoryRulesResponse,
    FilterOptionsResponse,
    HealthResponse,
    InitRulesRequest,
    InitRulesResponse,
    RandomRuleResponse,
    RuleModel,
    SearchRequest,
    SearchResponse,
    StatsResponse,
)

logger = logging.getLogger(__name__)

# Global store and engine, set up by the lifespan handler
_store: KeyValueStore | None = None
_engine: RulesSearchEngine | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown."""
    global _store, _engine
    _store = get_store(get_settings())
    _engine = RulesSearchEngine(_store)
    yield
    _store = None
    _engine = None


app = FastAPI(
    title="MTG Rules Lookup API",
    description="Keyword search over the Magic: The Gathering Comprehensive Rules",
    version="0.1.0",
    lifespan=lifespan,
)


def _require_engine() -> RulesSearchEngine:
    if _engine is None:
        raise HTTPException(status_code=503, detail="Rules store not initialized")
    return _engine


async def _run(func, *args):
    """Run a blocking store call in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


@app.get("/api/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse()


@app.post("/api/init-rules", response_model=InitRulesResponse)
async def init_rules(request: InitRulesRequest | None = None) -> InitRulesResponse:
    """Fetch, parse and index the rules, falling back to the built-in set."""
    _require_engine()
    force = request.force if request else False
    try:
        result = await _run(lambda: build_index(_store, force=force))
    except Exception as e:
        logger.exception("Error initializing rules")
        raise HTTPException(status_code=500, detail=f"Failed to initialize rules: {e}")

    return InitRulesResponse(
        count=result.count,
        message=result.message,
        used_fallback=result.used_fallback,
        skipped=result.skipped,
        last_error=result.last_error,
    )


@app.post("/api/search-rules", response_model=SearchResponse)
async def search_rules(request: SearchRequest) -> SearchResponse:
    """Search the rules with optional filters."""
    engine = _require_engine()
    if not request.query.strip():
        raise HTTPException(status_code=400, detail="Search query is required")

    rules = await _run(engine.search, request.query, request.filters.to_filters())
    return SearchResponse(
        rules=[RuleModel.from_rule(rule) for rule in rules],
        total=len(rules),
        query=request.query,
        filters=request.filters,
    )


@app.get("/api/search-rules", response_model=FilterOptionsResponse)
async def filter_options(category: str | None = None) -> FilterOptionsResponse:
    """List the values available for the search filters."""
    engine = _require_engine()
    keywords = await _run(engine.get_all_keywords)
    subcategories = await _run(engine.get_subcategories_for_category, category) if category else []
    return FilterOptionsResponse(
        keywords=keywords,
        rule_types=engine.get_all_rule_types(),
        complexity_levels=engine.get_complexity_levels(),
        subcategories=subcategories,
    )


@app.get("/api/rules-by-category", response_model=Union[CategoryRulesResponse, CategoriesResponse])
async def rules_by_category(category: str | None = None):
    """List the rules in a category, or the category catalogue when none is given."""
    engine = _require_engine()
    if not category:
        return CategoriesResponse(
            categories=[CategoryModel.from_category(c) for c in engine.get_categories()]
        )

    rules = await _run(engine.get_rules_by_category, category)
    return CategoryRulesResponse(
        rules=[RuleModel.from_rule(rule) for rule in rules],
        category=category,
    )


@app.get("/api/random-rule", response_model=RandomRuleResponse)
async def random_rule() -> RandomRuleResponse:
    """Return a random stored rule."""
    engine = _require_engine()
    rule = await _run(engine.get_random_rule)
    return RandomRuleResponse(rule=RuleModel.from_rule(rule) if rule else None)


@app.get("/api/rules-stats", response_model=StatsResponse)
async def rules_stats() -> StatsResponse:
    """Get dataset statistics."""
    engine = _require_engine()
    stats = await _run(engine.get_rules_stats)
    return StatsResponse(
        total_rules=stats.total_rules,
        last_updated=stats.last_updated,
        used_fallback=stats.used_fallback,
    )
