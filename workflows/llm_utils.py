"""
Shared LLM utilities.

Provides:
- LLM initialization from whichever provider key is configured
- Invocation with token/cost metrics and retry
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from api.core.config import get_settings

logger = logging.getLogger(__name__)


# Cost per 1M tokens
COST_PER_1M_TOKENS = {
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4o": {"input": 2.50, "output": 10.00},
    "claude-3-haiku-20240307": {"input": 0.25, "output": 1.25},
    "claude-3-5-sonnet-20241022": {"input": 3.00, "output": 15.00},
}

DEFAULT_MAX_OUTPUT_TOKENS = 1500


@dataclass
class LLMMetrics:
    """Metrics from LLM invocation."""
    model_name: str = ""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    estimated_cost_usd: float = 0.0
    execution_time_seconds: float = 0.0
    error_message: Optional[str] = None
    retry_count: int = 0


@dataclass
class LLMResponse:
    """Response from LLM invocation with metrics."""
    content: Optional[str] = None
    metrics: LLMMetrics = field(default_factory=LLMMetrics)
    success: bool = False


def get_llm_with_tracking(temperature: float = 0.3, max_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS):
    """
    Get the appropriate LLM based on available API keys.

    Returns:
        Tuple of (llm_instance, model_name) or (None, None) if no keys available
    """
    settings = get_settings()

    if settings.openai_api_key:
        from langchain_openai import ChatOpenAI
        return ChatOpenAI(
            model="gpt-4o-mini",
            api_key=settings.openai_api_key,
            temperature=temperature,
            max_tokens=max_tokens,
        ), "gpt-4o-mini"
    elif settings.anthropic_api_key:
        from langchain_anthropic import ChatAnthropic
        return ChatAnthropic(
            model="claude-3-haiku-20240307",
            api_key=settings.anthropic_api_key,
            temperature=temperature,
            max_tokens=max_tokens,
        ), "claude-3-haiku-20240307"
    else:
        return None, None


def calculate_cost(model_name: str, prompt_tokens: int, completion_tokens: int) -> float:
    """Calculate estimated cost in USD for token usage."""
    if model_name not in COST_PER_1M_TOKENS:
        # Default to gpt-4o-mini pricing if unknown
        model_name = "gpt-4o-mini"

    costs = COST_PER_1M_TOKENS[model_name]
    input_cost = (prompt_tokens / 1_000_000) * costs["input"]
    output_cost = (completion_tokens / 1_000_000) * costs["output"]
    return round(input_cost + output_cost, 6)


def estimate_tokens(text: str) -> int:
    """
    Estimate token count for text.
    Rough estimate: ~4 characters per token for English text.
    """
    if not text:
        return 0
    return len(text) // 4


def _record_usage(metrics: LLMMetrics, response, prompt: str) -> None:
    metadata = getattr(response, "response_metadata", None) or {}
    # OpenAI format
    if "token_usage" in metadata:
        usage = metadata["token_usage"]
        metrics.prompt_tokens = usage.get("prompt_tokens", 0)
        metrics.completion_tokens = usage.get("completion_tokens", 0)
        metrics.total_tokens = usage.get("total_tokens", 0)
    # Anthropic format
    elif "usage" in metadata:
        usage = metadata["usage"]
        metrics.prompt_tokens = usage.get("input_tokens", 0)
        metrics.completion_tokens = usage.get("output_tokens", 0)
        metrics.total_tokens = metrics.prompt_tokens + metrics.completion_tokens

    # If no token info from API, estimate
    if metrics.total_tokens == 0:
        metrics.prompt_tokens = estimate_tokens(prompt)
        metrics.completion_tokens = estimate_tokens(response.content) if response.content else 0
        metrics.total_tokens = metrics.prompt_tokens + metrics.completion_tokens

    metrics.estimated_cost_usd = calculate_cost(
        metrics.model_name, metrics.prompt_tokens, metrics.completion_tokens
    )


def invoke_llm_with_metrics(llm, prompt: str, model_name: str) -> LLMResponse:
    """
    Invoke LLM and return response with metrics.

    Provider errors are caught and reported through ``success=False``.
    """
    metrics = LLMMetrics(model_name=model_name)
    start_time = time.time()

    try:
        response = llm.invoke(prompt)
    except Exception as e:
        # Provider SDKs raise their own exception types
        metrics.execution_time_seconds = round(time.time() - start_time, 3)
        metrics.error_message = str(e)
        logger.exception(f"LLM invocation failed: {e}")
        return LLMResponse(content=None, metrics=metrics, success=False)

    metrics.execution_time_seconds = round(time.time() - start_time, 3)
    _record_usage(metrics, response, prompt)

    return LLMResponse(
        content=response.content,
        metrics=metrics,
        success=True,
    )


def invoke_llm_with_retry(
    llm,
    prompt: str,
    model_name: str,
    max_retries: int = 2,
    retry_delay: float = 1.0,
) -> LLMResponse:
    """
    Invoke LLM with automatic retry on failure.

    Args:
        llm: LangChain LLM instance
        prompt: The prompt to send
        model_name: Name of the model for cost calculation
        max_retries: Maximum number of retry attempts (default: 2)
        retry_delay: Delay between retries in seconds (default: 1.0)

    Returns:
        LLMResponse with content, metrics, and retry count
    """
    retry_count = 0

    for attempt in range(max_retries + 1):
        response = invoke_llm_with_metrics(llm, prompt, model_name)

        if response.success:
            response.metrics.retry_count = retry_count
            return response

        # Failed - increment retry count and try again (unless last attempt)
        if attempt < max_retries:
            retry_count += 1
            logger.warning(f"LLM call failed, retrying ({retry_count}/{max_retries})...")
            time.sleep(retry_delay)

    # All retries exhausted
    response.metrics.retry_count = retry_count
    return response
