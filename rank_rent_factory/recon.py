"""Recon stage: live market lookup for competitors and sub-areas."""

import logging
from dataclasses import dataclass

from .models import LogCallback, create_log

logger = logging.getLogger(__name__)

FALLBACK_TEXT = "Simulated data fallback due to API error."


@dataclass(frozen=True)
class ReconResult:
    text: str
    degraded: bool = False


def build_recon_prompt(location: str, niche: str) -> str:
    return (
        f'I am researching the local market for "{niche}" in "{location}".\n\n'
        "Please use web search to find the following REAL data:\n"
        f"1. List the top 3 existing competitors for {niche} in {location}. "
        "Include their names and their star ratings if available.\n"
        "2. List exactly 6 specific neighborhoods, suburbs, or districts within or "
        f"immediately surrounding {location} that appear to be residential or commercial hubs.\n\n"
        "Just list the facts."
    )


def perform_recon(location: str, niche: str, provider, on_log: LogCallback) -> ReconResult:
    """
    Gather grounding facts for the synthesis stage.

    Best effort: any provider failure, or an empty answer, degrades to
    FALLBACK_TEXT with a warning entry. Never raises.
    """
    on_log(create_log(f"Initializing market recon for: {niche} in {location}", "info"))
    prompt = build_recon_prompt(location, niche)

    try:
        on_log(create_log("Querying live location data...", "info"))
        text = provider.research(prompt)
    except Exception:
        logger.warning("Recon call failed for %r in %r", niche, location, exc_info=True)
        on_log(create_log("Recon API failed. Falling back to simulation.", "warning"))
        return ReconResult(text=FALLBACK_TEXT, degraded=True)

    if not text or not text.strip():
        logger.warning("Recon call returned no text for %r in %r", niche, location)
        on_log(create_log("Recon returned no data. Falling back to simulation.", "warning"))
        return ReconResult(text=FALLBACK_TEXT, degraded=True)

    on_log(create_log("Location data received. Extracted neighborhoods & competitors.", "success"))
    return ReconResult(text=text)
