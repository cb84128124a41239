"""Settings loaded from the environment (and .env, if present)."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigurationError

HAIKU_MODEL = "claude-haiku-4-5-20251001"
SONNET_MODEL = "claude-sonnet-4-5-20250929"

# Fixed for every synthesis call; not read from the environment.
SYNTHESIS_TEMPERATURE = 0.7


@dataclass(frozen=True)
class Settings:
    api_key: str | None
    recon_model: str = HAIKU_MODEL
    synthesis_model: str = SONNET_MODEL
    synthesis_max_tokens: int = 16000
    plans_dir: Path = Path("plans")

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            api_key=os.getenv("ANTHROPIC_API_KEY") or None,
            recon_model=os.getenv("RANK_RENT_RECON_MODEL", HAIKU_MODEL),
            synthesis_model=os.getenv("RANK_RENT_SYNTHESIS_MODEL", SONNET_MODEL),
            synthesis_max_tokens=int(os.getenv("RANK_RENT_SYNTHESIS_MAX_TOKENS", "16000")),
            plans_dir=Path(os.getenv("RANK_RENT_PLANS_DIR", "plans")),
        )

    def require_api_key(self) -> str:
        if not self.api_key or not self.api_key.strip():
            raise ConfigurationError(
                "ANTHROPIC_API_KEY not set. Please check your environment configuration."
            )
        return self.api_key
