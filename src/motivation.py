# src/motivation.py
import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Optional

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, Field

from habits import Habit, compute_streak
from settings import AIConfig, load_config

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Couldn't get a motivational message. Keep trying!"
MAX_SENTENCES = 2

SYSTEM_PROMPT = "You are a motivational coach."

PROMPT_TEMPLATE = """You will generate a personalized motivational message based on the user's habit tracking history.

Habit Name: {habit_name}
Completion History: {completion_history}
Streak Length: {streak_length}

Generate a motivational message to encourage the user to continue tracking their habit.
If the user has a streak, encourage them to keep the streak going.
The message should be no more than 2 sentences."""

_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


class MotivationError(Exception):
    """The provider answered but the reply could not be used."""


class MotivationRequest(BaseModel):
    habit_name: str = Field(min_length=1)
    completion_history: str = ""
    streak_length: int = Field(default=0, ge=0)

    @classmethod
    def from_habit(cls, habit: Habit, today=None) -> "MotivationRequest":
        return cls(
            habit_name=habit.name,
            completion_history=",".join(habit.completion_strings()),
            streak_length=compute_streak(habit.completions, today),
        )

    def to_prompt(self) -> str:
        return PROMPT_TEMPLATE.format(
            habit_name=self.habit_name,
            completion_history=self.completion_history or "none yet",
            streak_length=self.streak_length,
        )


@dataclass
class MotivationResult:
    success: bool
    message: str
    attempts: int = 0
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "attempts": self.attempts,
            "error": self.error,
        }


def get_openai_client(config: AIConfig) -> Optional[AsyncOpenAI]:
    if not config.enabled:
        logger.warning("OPENAI_API_KEY is not set, motivational messages disabled")
        return None
    # Retries are counted here, not inside the SDK
    return AsyncOpenAI(api_key=config.openai_api_key, timeout=config.request_timeout, max_retries=0)


def limit_sentences(text: str, limit: int = MAX_SENTENCES) -> str:
    sentences = _SENTENCE_END.split(text.strip())
    return " ".join(sentences[:limit])


async def _request_message(client, request: MotivationRequest, config: AIConfig) -> str:
    response = await asyncio.wait_for(
        client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": request.to_prompt()},
            ],
            max_tokens=config.max_tokens,
            temperature=0.9,
        ),
        timeout=config.request_timeout,
    )
    choices = getattr(response, "choices", None)
    if not choices or choices[0].message is None:
        raise MotivationError("empty response")
    content = (choices[0].message.content or "").strip()
    if not content:
        raise MotivationError("empty message")
    return limit_sentences(content)


async def generate_motivational_message(request: MotivationRequest, client=None,
                                        config: Optional[AIConfig] = None) -> MotivationResult:
    """Ask the language model for a short message, falling back on failure.

    Makes at most ``config.max_attempts`` attempts. Never raises; a failed
    call returns ``success=False`` with FALLBACK_MESSAGE.
    """
    config = config or load_config().ai
    if client is None:
        client = get_openai_client(config)
    if client is None:
        return MotivationResult(success=False, message=FALLBACK_MESSAGE, error="AI service not configured")

    last_error = None
    attempt = 0
    for attempt in range(1, config.max_attempts + 1):
        try:
            message = await _request_message(client, request, config)
            logger.info("Motivational message for '%s' after %d attempt(s)", request.habit_name, attempt)
            return MotivationResult(success=True, message=message, attempts=attempt)
        except (openai.OpenAIError, asyncio.TimeoutError, MotivationError) as e:
            last_error = e
            logger.warning("Motivation attempt %d/%d failed: %s", attempt, config.max_attempts, e)
        except Exception as e:
            last_error = e
            logger.exception("Unexpected error on motivation attempt %d/%d", attempt, config.max_attempts)
            break
        if attempt < config.max_attempts and config.retry_delay:
            await asyncio.sleep(config.retry_delay * attempt)

    return MotivationResult(
        success=False,
        message=FALLBACK_MESSAGE,
        attempts=attempt,
        error=str(last_error) or type(last_error).__name__,
    )
