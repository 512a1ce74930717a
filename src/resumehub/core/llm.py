import logging

from google import genai

from resumehub.core.config import Settings
from resumehub.core.exceptions import AIConfigurationError
from resumehub.services.resume_parser import (
    DeepSeekResumeParser,
    GeminiResumeParser,
    ResumeParser,
    RetryingResumeParser,
)

logger = logging.getLogger(__name__)


def get_gemini_client(api_key: str) -> genai.Client:
    """Create a Gemini API client for the given API key."""
    return genai.Client(api_key=api_key)


def build_resume_parser(settings: Settings) -> ResumeParser:
    """Build the resume parser for the configured AI provider.

    Raises ``AIConfigurationError`` when the provider's credential is missing,
    so a misconfigured deployment fails at startup instead of per upload.
    """
    parser: ResumeParser
    if settings.ai_provider == "gemini":
        if not settings.google_ai_api_key:
            raise AIConfigurationError("Gemini API key is not configured")
        parser = GeminiResumeParser(
            get_gemini_client(settings.google_ai_api_key),
            settings.gemini_model,
            timeout_seconds=settings.ai_timeout_seconds,
            temperature=settings.ai_temperature,
            max_output_tokens=settings.ai_max_output_tokens,
        )
    elif settings.ai_provider == "deepseek":
        parser = DeepSeekResumeParser(
            settings.deepseek_api_key,
            api_url=settings.deepseek_api_url,
            model=settings.deepseek_model,
            timeout_seconds=settings.ai_timeout_seconds,
            temperature=settings.ai_temperature,
            max_output_tokens=settings.ai_max_output_tokens,
        )
    else:
        raise AIConfigurationError(f"Unknown AI provider: {settings.ai_provider}")

    if settings.ai_max_retries > 0:
        parser = RetryingResumeParser(
            parser,
            max_retries=settings.ai_max_retries,
            backoff_seconds=settings.ai_retry_backoff_seconds,
        )

    logger.info("Resume parsing uses the %s provider", parser.provider)
    return parser
