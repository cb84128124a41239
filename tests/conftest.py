import copy
import json
from typing import Any

import pytest

from rank_rent_factory.config import Settings


def make_plan_payload(**overrides) -> dict[str, Any]:
    payload = {
        "location": "Milano, IT",
        "niche": "Idraulico",
        "language": "it",
        "executiveSummary": "Milano ha una domanda costante di idraulici d'urgenza.",
        "gmbAnalysis": {
            "primaryCategory": "Idraulico",
            "secondaryCategories": ["Servizio di riparazione scaldabagni", "Spurgo"],
        },
        "geoGridStrategy": [
            {"name": "Navigli", "type": "Neighborhood", "targetValue": "High"},
            {"name": "Sesto San Giovanni", "type": "Suburb", "targetValue": "Medium"},
            {"name": "Municipio 3", "type": "District", "targetValue": "Low"},
        ],
        "competitorAnalysis": [
            {
                "name": "Idraulica Rossi",
                "weakness": "Non rispondono al telefono nel weekend.",
                "contentGap": ["pronto intervento notturno"],
            }
        ],
        "keywords": [
            {
                "keyword": "idraulico milano",
                "avgMonthlySearches": 2400,
                "competition": "High",
                "cpcLow": 1.2,
                "cpcHigh": 4.5,
            },
            {
                "keyword": "idraulico pronto intervento milano",
                "avgMonthlySearches": 880,
                "competition": "Medium",
                "cpcLow": 2,
                "cpcHigh": 2,
            },
        ],
        "domainStrategy": {
            "selectedDomain": "idraulicomilano24.it",
            "domainType": "Exact match",
            "alternatives": ["prontoidraulicomilano.it"],
            "rationale": "Contiene la keyword principale e la città.",
        },
        "leadFunnel": {
            "strategy": "Qualificare per urgenza e tipo di guasto.",
            "questions": [
                {
                    "question": "Che tipo di intervento ti serve?",
                    "options": ["Perdita", "Scarico intasato", "Caldaia"],
                    "rationale": "Segmenta il lead per valore.",
                }
            ],
        },
        "websiteStructure": {
            "strategy": "Silo per servizio e quartiere.",
            "serviceSilos": [
                {
                    "pageTitle": "Spurgo Milano",
                    "urlSlug": "/spurgo-milano",
                    "targetKeyword": "spurgo milano",
                    "contentFocus": "Interventi rapidi su scarichi.",
                }
            ],
        },
        "googleAdsPlan": {
            "adGroups": [{"name": "Emergenza", "targetKeywords": ["idraulico urgente milano"]}],
            "exampleAd": {
                "headline1": "Idraulico a Milano",
                "headline2": "Arriviamo in 30 minuti",
                "description": "Pronto intervento 24/7. Preventivo gratuito.",
            },
        },
        "profitProjection": {
            "estimatedAdSpend": 600,
            "targetSalePricePerLead": 35,
            "totalPotentialRevenue": 2100,
            "netProfit": 1500,
            "leadsCount": 60,
        },
        "astroStack": {
            "framework": "Astro 4",
            "styling": "Tailwind CSS",
            "deployment": "Netlify",
            "cms": "None",
            "templateRepo": "withastro/astro",
            "rationale": "Statico, veloce, ottimo per la SEO locale.",
        },
        "siteAssets": [
            {
                "path": "src/pages/index.astro",
                "content": "---\nimport Layout from '../layouts/Layout.astro';\n---\n<Layout />",
                "language": "html",
                "description": "Homepage",
            },
            {
                "path": "src/data/siteData.ts",
                "content": "export const SITE_DATA = { city: 'Milano' };",
                "language": "typescript",
                "description": "Dati del sito",
            },
            {
                "path": "package.json",
                "content": '{"name": "idraulico-milano"}',
                "language": "json",
                "description": "Configurazione progetto",
            },
        ],
    }
    payload.update(overrides)
    return payload


class FakeProvider:
    """Records calls; research/synthesize return canned text or raise the given exception."""

    def __init__(
        self,
        research_response: Any = "Competitors: Idraulica Rossi (4.1). Areas: Navigli, Brera.",
        synthesis_response: Any = None,
    ) -> None:
        self.research_response = research_response
        self.synthesis_response = (
            json.dumps(make_plan_payload()) if synthesis_response is None else synthesis_response
        )
        self.calls: list[dict[str, Any]] = []

    def research(self, prompt: str) -> str:
        self.calls.append({"kind": "research", "prompt": prompt})
        if isinstance(self.research_response, Exception):
            raise self.research_response
        return self.research_response

    def synthesize(self, system: str, user: str, temperature: float = 0.7) -> str:
        self.calls.append({"kind": "synthesize", "system": system, "user": user, "temperature": temperature})
        if isinstance(self.synthesis_response, Exception):
            raise self.synthesis_response
        return self.synthesis_response


@pytest.fixture
def plan_payload():
    return copy.deepcopy(make_plan_payload())


@pytest.fixture
def settings(tmp_path):
    return Settings(api_key="test-key", plans_dir=tmp_path / "plans")


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def make_provider():
    def _factory(research_response: Any = None, synthesis_response: Any = None):
        kwargs = {}
        if research_response is not None:
            kwargs["research_response"] = research_response
        if synthesis_response is not None:
            kwargs["synthesis_response"] = synthesis_response
        return FakeProvider(**kwargs)

    return _factory
