"""Pydantic models for the web API."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mtgrules.core.rule import Rule, RuleCategory
from mtgrules.search import SearchFilters


class ApiModel(BaseModel):
    """Base model serialized with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RuleModel(ApiModel):
    """A stored rule."""

    number: str
    title: str
    content: str
    category: str
    subcategory: str | None = None
    section: str
    keywords: list[str] = Field(default_factory=list)
    examples: list[str] = Field(default_factory=list)

    @classmethod
    def from_rule(cls, rule: Rule) -> "RuleModel":
        return cls(**rule.as_dict())


class CategoryModel(ApiModel):
    """A top-level rules section."""

    id: str
    name: str
    description: str
    subcategories: list[str] = Field(default_factory=list)

    @classmethod
    def from_category(cls, category: RuleCategory) -> "CategoryModel":
        return cls(**category.as_dict())


class SearchFiltersModel(ApiModel):
    """Optional search restrictions. Blank strings are treated as unset."""

    category: str | None = None
    subcategory: str | None = None
    rule_type: str | None = None
    keywords: list[str] = Field(default_factory=list)
    complexity: str | None = None

    def to_filters(self) -> SearchFilters:
        return SearchFilters.from_dict(self.model_dump())


class SearchRequest(ApiModel):
    """Request body for a rules search."""

    query: str = Field(default="", description="Free-text search query")
    filters: SearchFiltersModel = Field(default_factory=SearchFiltersModel)


class SearchResponse(ApiModel):
    """Rules matching a search."""

    rules: list[RuleModel]
    total: int
    query: str
    filters: SearchFiltersModel


class FilterOptionsResponse(ApiModel):
    """Values available for the search filters."""

    keywords: list[str]
    rule_types: list[str]
    complexity_levels: list[str]
    subcategories: list[str] = Field(default_factory=list)


class CategoryRulesResponse(ApiModel):
    """Rules belonging to one category."""

    rules: list[RuleModel]
    category: str


class CategoriesResponse(ApiModel):
    """The static category catalogue."""

    categories: list[CategoryModel]


class RandomRuleResponse(ApiModel):
    """A randomly chosen rule, or null when nothing is stored."""

    rule: RuleModel | None = None


class InitRulesRequest(ApiModel):
    """Request body for loading the rules."""

    force: bool = Field(default=False, description="Re-ingest even when rules are already loaded")


class InitRulesResponse(ApiModel):
    """Outcome of loading the rules."""

    success: bool = True
    count: int
    message: str
    used_fallback: bool = False
    skipped: bool = False
    last_error: str | None = None


class StatsResponse(ApiModel):
    """Dataset statistics."""

    total_rules: int
    last_updated: str | None = None
    used_fallback: bool = False


class HealthResponse(ApiModel):
    """Response for health check endpoint."""

    status: str = "ok"
    version: str = "0.1.0"
