"""Plan schema and progress log types.

The pydantic models below are the single source of truth for what a generated
plan looks like. The same classes produce the JSON schema embedded in the
synthesis prompt and validate the payload that comes back.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from .errors import SchemaViolation

Language = Literal["en", "it", "es", "fr", "de"]
LANGUAGES: tuple[str, ...] = get_args(Language)

LANGUAGE_NAMES = {
    "en": "English",
    "it": "Italian",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
}

Level = Literal["High", "Medium", "Low"]
LogType = Literal["info", "success", "warning", "error"]


class PlanModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        frozen=True,
        strict=True,
        allow_inf_nan=False,
    )


class GmbAnalysis(PlanModel):
    primary_category: str
    secondary_categories: list[str]


class GeoGridPoint(PlanModel):
    name: str
    type: Literal["Neighborhood", "Suburb", "District"]
    target_value: Level


class CompetitorAnalysis(PlanModel):
    name: str
    weakness: str = Field(description="The primary complaint found in 1-star reviews.")
    content_gap: list[str] = Field(description="Keywords/services they are failing to target.")


class KeywordMetric(PlanModel):
    keyword: str
    avg_monthly_searches: float = Field(ge=0)
    competition: Level
    cpc_low: float = Field(ge=0)
    cpc_high: float = Field(ge=0)

    @model_validator(mode="after")
    def _cpc_range(self):
        if self.cpc_high < self.cpc_low:
            raise ValueError("cpcHigh must be greater than or equal to cpcLow")
        return self


class DomainStrategy(PlanModel):
    selected_domain: str
    domain_type: str
    alternatives: list[str]
    rationale: str


class QualifyingQuestion(PlanModel):
    question: str
    options: list[str]
    rationale: str


class LeadFunnel(PlanModel):
    strategy: str
    questions: list[QualifyingQuestion]


class SiloPage(PlanModel):
    page_title: str
    url_slug: str
    target_keyword: str
    content_focus: str


class WebsiteStructure(PlanModel):
    strategy: str
    service_silos: list[SiloPage]


class AdGroup(PlanModel):
    name: str
    target_keywords: list[str]


class AdCopy(PlanModel):
    headline1: str
    headline2: str
    description: str


class GoogleAdsPlan(PlanModel):
    ad_groups: list[AdGroup]
    example_ad: AdCopy


class ProfitProjection(PlanModel):
    estimated_ad_spend: float
    target_sale_price_per_lead: float
    total_potential_revenue: float
    net_profit: float
    leads_count: float


class AstroStack(PlanModel):
    framework: str
    styling: str
    deployment: str
    cms: str
    template_repo: str
    rationale: str


class SiteAsset(PlanModel):
    path: str = Field(description="Relative file path, e.g. src/pages/index.astro")
    content: str
    language: Literal["typescript", "markdown", "json", "html", "css"]
    description: str

    @model_validator(mode="after")
    def _relative_path(self):
        if not is_safe_relative_path(self.path):
            raise ValueError(f"path {self.path!r} is not a valid relative file path")
        return self


class BusinessPlan(PlanModel):
    location: str
    niche: str
    language: Language
    executive_summary: str = Field(
        description="A punchy, direct-response style paragraph summarizing why this is a money-making opportunity."
    )
    gmb_analysis: GmbAnalysis
    geo_grid_strategy: list[GeoGridPoint]
    competitor_analysis: list[CompetitorAnalysis]
    keywords: list[KeywordMetric]
    domain_strategy: DomainStrategy
    lead_funnel: LeadFunnel
    website_structure: WebsiteStructure
    google_ads_plan: GoogleAdsPlan
    profit_projection: ProfitProjection
    astro_stack: AstroStack
    site_assets: list[SiteAsset] = Field(description="The complete source code for the Astro project.")

    @model_validator(mode="after")
    def _unique_asset_paths(self):
        seen: set[str] = set()
        for asset in self.site_assets:
            if asset.path in seen:
                raise ValueError(f"duplicate siteAssets path {asset.path!r}")
            seen.add(asset.path)
        return self

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


def is_safe_relative_path(path: str) -> bool:
    """True for a non-empty relative POSIX path that stays inside its root.

    >>> is_safe_relative_path("src/pages/index.astro")
    True
    >>> is_safe_relative_path("../etc/passwd")
    False
    """
    if not path or not path.strip() or "\\" in path or "\x00" in path:
        return False
    if re.match(r"^[A-Za-z]:", path):
        return False
    # Leading "/" and "//" both show up as empty segments
    return all(part not in ("", ".", "..") for part in path.split("/"))


def plan_json_schema() -> dict:
    """JSON schema of BusinessPlan, camelCase field names."""
    return BusinessPlan.model_json_schema(by_alias=True)


def parse_business_plan(text: str) -> BusinessPlan:
    """
    Parse provider text into a validated BusinessPlan.

    Tolerates code fences or prose around the JSON object. Anything else
    (invalid JSON, missing fields, wrong types, out-of-enum values) raises
    SchemaViolation listing the offending fields.
    """
    if not text or not text.strip():
        raise SchemaViolation("Empty plan payload")

    # Extract JSON, handle nested arrays/objects
    payload = text.strip()
    json_match = re.search(r"\{.*\}", payload, re.DOTALL)
    if json_match:
        payload = json_match.group()

    try:
        return BusinessPlan.model_validate_json(payload)
    except ValidationError as e:
        errors = [
            (".".join(str(part) for part in err["loc"]) or "<root>", err["msg"])
            for err in e.errors()
        ]
        raise SchemaViolation("Plan payload failed schema validation", errors) from e


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    message: str
    type: LogType = "info"

    def to_dict(self) -> dict:
        return {"timestamp": self.timestamp, "message": self.message, "type": self.type}


LogCallback = Callable[[LogEntry], None]


def create_log(message: str, type: LogType = "info") -> LogEntry:
    return LogEntry(timestamp=datetime.now().strftime("%H:%M:%S"), message=message, type=type)
