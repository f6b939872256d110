import logging

from skillpath.ai.config import load_ai_config
from skillpath.ai.providers.openai_provider import from_config
from skillpath.ai.types import TextGenerator

logger = logging.getLogger(__name__)


def get_text_generator() -> TextGenerator | None:
    """Configured generator, or None when no usable provider is set up."""
    cfg = load_ai_config()
    if not cfg.usable:
        logger.info("llm_disabled provider=%s enabled=%s", cfg.provider, cfg.enabled)
        return None

    if cfg.provider == "openai":
        return from_config(cfg)

    raise ValueError(f"Unsupported AI_PROVIDER='{cfg.provider}'")
