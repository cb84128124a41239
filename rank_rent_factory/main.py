"""Orchestration: inputs -> recon -> synthesis -> BusinessPlan."""

import asyncio
import logging

from .config import Settings
from .models import LANGUAGES, BusinessPlan, LogCallback, LogEntry
from .provider import AnthropicProvider
from .recon import perform_recon
from .synthesis import synthesize_plan

logger = logging.getLogger(__name__)


def validate_request(location: str, niche: str, language: str) -> None:
    """Raise ValueError unless location and niche are non-blank and language is supported."""
    if not isinstance(location, str) or not location.strip():
        raise ValueError("location must be a non-empty string")
    if not isinstance(niche, str) or not niche.strip():
        raise ValueError("niche must be a non-empty string")
    if language not in LANGUAGES:
        raise ValueError(f"language must be one of {', '.join(LANGUAGES)}, got {language!r}")


def generate_business_plan(
    location: str,
    niche: str,
    language: str,
    on_log: LogCallback | None = None,
    *,
    settings: Settings | None = None,
    provider=None,
) -> BusinessPlan:
    """
    Generate a business plan for a niche in a location.

    Steps:
        1. Validate inputs and the provider credential (no call is made without one)
        2. Recon: live competitor / sub-area lookup, degrading to fallback text
        3. Synthesis: structured plan + site files, validated against the schema

    Args:
        location: Target location, e.g. "Milano, IT"
        niche: Target niche, e.g. "Idraulico"
        language: One of en, it, es, fr, de
        on_log: Optional callback(LogEntry), called in emission order as entries occur
        settings: Defaults to Settings.from_env()
        provider: Defaults to an AnthropicProvider built from settings

    Returns:
        A validated BusinessPlan whose location/niche/language echo the inputs

    Raises:
        ValueError: invalid inputs
        ConfigurationError: no API key configured
        SynthesisFailure / SchemaViolation: synthesis failed
    """
    def _log(entry: LogEntry):
        if on_log:
            on_log(entry)

    validate_request(location, niche, language)

    settings = settings or Settings.from_env()
    settings.require_api_key()
    if provider is None:
        provider = AnthropicProvider(settings)

    # Step 1: Recon (never raises)
    recon = perform_recon(location, niche, provider, _log)
    if recon.degraded:
        logger.info("Continuing to synthesis with fallback recon text")

    # Step 2: Synthesis (fatal on failure)
    plan = synthesize_plan(location, niche, language, recon.text, provider, _log)

    return plan.model_copy(update={"location": location, "niche": niche, "language": language})


async def generate_business_plan_async(
    location: str,
    niche: str,
    language: str,
    on_log: LogCallback | None = None,
    **kwargs,
) -> BusinessPlan:
    """Run generate_business_plan in a worker thread. on_log is called from that thread."""
    return await asyncio.to_thread(generate_business_plan, location, niche, language, on_log, **kwargs)
