"""
Summarization of course material text.

Wraps the shared LLM utilities; any failure surfaces as a 503 so clients can
tell "summaries are down" apart from a bad request.
"""
import logging

from api.core.config import get_settings
from api.core.errors import UpstreamFailure, ValidationFailed
from workflows.llm_utils import get_llm_with_tracking, invoke_llm_with_retry

logger = logging.getLogger(__name__)

SUMMARY_UNAVAILABLE = "Summarization unavailable"

SUMMARY_PROMPT = (
    "Please provide a comprehensive summary of the following educational content. "
    "Focus on key concepts, main points, and important details that students should understand:"
    "\n\n{text}"
)


def _unavailable() -> UpstreamFailure:
    return UpstreamFailure(SUMMARY_UNAVAILABLE, status_code=503)


def summarize_text(text: str, max_retries: int = 2, retry_delay: float = 1.0) -> str:
    """
    Summarize educational text.

    Raises:
        ValidationFailed: text is empty
        UpstreamFailure: (503) no LLM configured or the call failed
    """
    if not text or not text.strip():
        raise ValidationFailed("Text is required for summarization.")

    max_chars = get_settings().summary_max_chars
    if len(text) > max_chars:
        logger.info(f"Truncated summary input from {len(text)} to {max_chars} characters")
        text = text[:max_chars] + "\n\n[... text truncated for length ...]"

    llm, model_name = get_llm_with_tracking()
    if llm is None:
        logger.warning("No LLM API key configured for summarization")
        raise _unavailable()

    response = invoke_llm_with_retry(
        llm,
        SUMMARY_PROMPT.format(text=text),
        model_name,
        max_retries=max_retries,
        retry_delay=retry_delay,
    )
    if not response.success or not response.content:
        logger.error(f"Summarization failed: {response.metrics.error_message}")
        raise _unavailable()

    logger.info(
        f"Summarized {len(text)} chars with {model_name} "
        f"({response.metrics.total_tokens} tokens, ${response.metrics.estimated_cost_usd})"
    )
    return response.content.strip()
