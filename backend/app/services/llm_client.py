"""
LLM Client Abstraction
Single entry point for all AI calls in the wall estimator.
Primary: Groq LLaMA 3.1 70B
Fallback: Google Gemini 1.5 Flash
"""
import os
import logging
import litellm

logger = logging.getLogger("archlens-llm")

PRIMARY_MODEL = os.getenv("LLM_PRIMARY_MODEL", "groq/llama-3.1-70b-versatile")
FALLBACK_MODEL = os.getenv("LLM_FALLBACK_MODEL", "gemini/gemini-1.5-flash")

# Suppress litellm verbose logging
litellm.set_verbose = False


async def complete(
    messages: list,
    temperature: float = 0.1,
    json_mode: bool = False,
    max_tokens: int = 4096,
) -> str:
    """
    Call the primary LLM. Falls back to the secondary model on rate limit or error.
    Returns the response content string.
    """
    kwargs = {
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    try:
        response = await litellm.acompletion(model=PRIMARY_MODEL, **kwargs)
        return response.choices[0].message.content
    except litellm.RateLimitError:
        logger.warning("Primary LLM rate limit hit — falling back")
    except litellm.AuthenticationError:
        logger.warning("Primary LLM auth error — falling back")
    except Exception as e:
        logger.warning(f"Primary LLM error ({type(e).__name__}: {e}) — falling back")

    try:
        fallback_kwargs = {k: v for k, v in kwargs.items() if k != "response_format"}
        if json_mode:
            messages = [dict(m) for m in fallback_kwargs["messages"]]
            if messages and messages[0]["role"] == "system":
                messages[0]["content"] += "\n\nIMPORTANT: Respond with valid JSON only."
            else:
                messages = [{"role": "system", "content": "You must respond with valid JSON only."}] + messages
            fallback_kwargs["messages"] = messages
        response = await litellm.acompletion(model=FALLBACK_MODEL, **fallback_kwargs)
        return response.choices[0].message.content
    except Exception as e:
        logger.error(f"Both LLMs failed. Fallback error: {e}")
        raise RuntimeError(f"All LLM providers failed. Last error: {e}")


def get_system_prompt(role: str) -> str:
    """Standard system prompts for the wall estimator's AI roles."""
    prompts = {
        "structural_engineer": (
            "You are a Structural Engineer specializing in residential construction cost estimation. "
            "You classify masonry walls into 9-inch load-bearing walls and 4.5-inch partition walls "
            "from room schedules, and you estimate door and window opening percentages by room type. "
            "Always return structured, precise data."
        ),
        "civil_engineer": (
            "You are a Senior Civil Engineer with 20+ years of residential construction experience. "
            "You recommend brick, block, cement and sand combinations that fit a project's quality tier "
            "and budget, using only materials present in the supplied catalog."
        ),
    }
    return prompts.get(role, prompts["civil_engineer"])
