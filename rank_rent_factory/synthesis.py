"""Synthesis stage: turn recon notes into a validated BusinessPlan."""

import json
import logging

from .config import SYNTHESIS_TEMPERATURE
from .errors import SchemaViolation, SynthesisFailure
from .models import LANGUAGE_NAMES, BusinessPlan, LogCallback, create_log, parse_business_plan, plan_json_schema

logger = logging.getLogger(__name__)

# (path, purpose) for every file the generated bundle must contain.
SITE_FILES = (
    (
        "src/data/siteData.ts",
        "Export const SITE_DATA with title, description, phone, email, city, niche, "
        "and a 'locations' array holding the geo-grid points found in the input data.",
    ),
    (
        "src/data/questions.ts",
        "Export const QUESTIONS: the multi-step funnel questions for the niche. "
        "Fields: id, question, type (radio/text), options[].",
    ),
    (
        "src/layouts/Layout.astro",
        "An SEO-optimized layout with a sticky header carrying a 'Call Now' button and a clean footer.",
    ),
    (
        "src/pages/index.astro",
        "The high-converting homepage: hero section with form, 'How it works', a 'Service Areas' "
        "grid mapping through the locations, realistic placeholder testimonials. Import LeadForm "
        "from '../components/LeadForm' and render it with <LeadForm client:load />.",
    ),
    (
        "src/components/LeadForm.tsx",
        "An interactive React multi-step wizard with a progress bar and smooth transitions. "
        "On submit, console.log the lead (ready for backend integration).",
    ),
    (
        "package.json",
        'Dependencies must include "astro", "react", "react-dom", "@astrojs/react", '
        '"@astrojs/tailwind" and "tailwindcss", with versions valid for Astro v4+.',
    ),
    (
        "tailwind.config.mjs",
        "Standard Tailwind config scanning src/.",
    ),
    (
        "astro.config.mjs",
        "Required to render React components: import { defineConfig } from 'astro/config'; "
        "import react from '@astrojs/react'; import tailwind from '@astrojs/tailwind'; "
        "export default defineConfig({ integrations: [react(), tailwind()] });",
    ),
)


def build_system_prompt(language: str, recon_text: str) -> str:
    lang = language.upper()
    lang_name = LANGUAGE_NAMES[language]

    files = "\n".join(
        f"{i}. {path}: {purpose}" for i, (path, purpose) in enumerate(SITE_FILES, start=1)
    )
    schema = json.dumps(plan_json_schema(), separators=(",", ":"))

    return (
        "You are the Chief Technology Officer of an elite pay-per-lead agency. "
        "Your task is to generate a complete deployment bundle for a rank & rent website, "
        "together with the market plan behind it.\n\n"
        f"TARGET LANGUAGE: {lang} ({lang_name})\n"
        f"ALL natural-language content (summary, analysis, site copy, labels, button text, "
        f"ad copy) MUST be written in {lang_name}.\n\n"
        "INPUT DATA (REAL-TIME INTELLIGENCE):\n"
        f"{recon_text}\n\n"
        "DESIGN SYSTEM:\n"
        "- Clean white background, trust-heavy design.\n"
        '- Hero section: "Find the best [Niche] in [Location]".\n'
        '- Action-oriented call to action: "Request Quote", localized.\n'
        "- Tailwind colors: emerald-600 (primary), slate-900 (text).\n\n"
        "FILES TO GENERATE (in 'siteAssets', one entry per file, these exact paths):\n"
        f"{files}\n\n"
        "Use the geo-grid points from the input data for 'geoGridStrategy' and the "
        "competitors for 'competitorAnalysis'. For every keyword, cpcHigh must be "
        "greater than or equal to cpcLow. Every siteAssets path must be unique.\n\n"
        "Tone: ruthless efficiency, high conversion.\n\n"
        "Respond with a single JSON object only, no other text, conforming to this JSON schema:\n"
        f"{schema}"
    )


def build_user_prompt(location: str, niche: str, language: str) -> str:
    return (
        f"Target Location: {location}\n"
        f"Target Niche: {niche}\n"
        f"Language: {language}\n\n"
        "Generate the Deployment Bundle."
    )


def synthesize_plan(
    location: str,
    niche: str,
    language: str,
    recon_text: str,
    provider,
    on_log: LogCallback,
) -> BusinessPlan:
    """
    Generate and validate the business plan. Failures are fatal and not retried.

    Raises:
        SynthesisFailure: the provider call failed or returned no text.
        SchemaViolation: the returned payload did not match the plan schema.
    """
    on_log(create_log("Analyzing competitor weaknesses from recon data...", "info"))
    on_log(create_log(f'Calculating "money" keywords for {language.upper()} market...', "info"))

    system = build_system_prompt(language, recon_text)
    user = build_user_prompt(location, niche, language)

    on_log(create_log("Synthesizing master blueprint...", "info"))
    on_log(create_log("Generating Astro/React site template...", "info"))
    on_log(create_log(f"Writing localized content in {language.upper()}...", "info"))

    try:
        text = provider.synthesize(system, user, temperature=SYNTHESIS_TEMPERATURE)
        if not text:
            raise SynthesisFailure("No response from synthesis provider")
        plan = parse_business_plan(text)
    except SchemaViolation as e:
        logger.error("Synthesis payload rejected: %s", e)
        on_log(create_log("CRITICAL FAILURE in synthesis engine: invalid blueprint.", "error"))
        raise
    except SynthesisFailure:
        logger.error("Synthesis returned no text")
        on_log(create_log("CRITICAL FAILURE in synthesis engine.", "error"))
        raise
    except Exception as e:
        logger.exception("Synthesis call failed")
        on_log(create_log("CRITICAL FAILURE in synthesis engine.", "error"))
        raise SynthesisFailure(f"Synthesis call failed: {e}") from e

    on_log(create_log("Blueprint generation complete.", "success"))
    return plan
