"""
Eco chat assistant.

Relays a user's message to an OpenAI-compatible chat completions gateway and
returns the model's text verbatim. When the caller is signed in, their totals
and recent weekly trend are folded into the system prompt.

Failures never escape as exceptions: every outcome is a ChatResult carrying
either a reply or an error plus a canned fallback message. One attempt per
message, no retries.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import openai
from openai import OpenAI

from services.weekly_aggregator import percent_change_label, week_over_week

logger = logging.getLogger(__name__)

NO_REPLY_FALLBACK = "I'm having trouble responding right now. Try again!"
RATE_LIMITED_ERROR = "Rate limit exceeded. Please try again in a moment."
RATE_LIMITED_FALLBACK = "I'm a bit busy right now 🌿. Try asking me again in a few seconds!"
PAYMENT_REQUIRED_ERROR = "Payment required."
PAYMENT_REQUIRED_FALLBACK = "I'm temporarily unavailable. Please contact support if this persists."
GENERIC_FALLBACK = "I'm having trouble thinking right now 🤔. Try asking something else!"

BASE_SYSTEM_PROMPT = """You are Carbonie 🌿, the friendly assistant inside CarbonPrint, an app that helps people track the carbon footprint of their digital life.

Your role:
- Help users understand the CO₂ emitted by their digital activity (sending photos, videos, messages)
- Encourage eco-friendly digital habits in a kind, fun, human way
- Use the user's real data when it is provided
- Always relate emissions to real-world comparisons

Tone:
- Friendly, supportive and motivating; a few emojis 🌱🌍💚, not many
- 2-3 lines per reply at most
- End every message with a small eco emoji 🌱 or 💚

Reference figures:
- 1 MB transferred ≈ 0.02 g CO₂
- 1-hour video call ≈ 150 g CO₂
- Streaming 1 hour of HD video ≈ 55 g CO₂
- Charging one phone ≈ 18 g CO₂
- Driving a car ≈ 120 g CO₂ per km
- Boiling a kettle ≈ 7 g CO₂
- A 60W bulb for 1 hour ≈ 36 g CO₂
- One tree absorbs ≈ 21 kg CO₂ per year (≈ 0.058 kg per day)
- Tips: compress files, delete spam, use dark mode, clean up cloud storage, lower video quality

Example comparisons:
- "Your 0.4 kg CO₂ this week = driving 3.3 km 🚗"
- "You saved 0.1 kg CO₂ = powering a bulb for 2.8 hours! 💡"
- "That file = boiling a kettle twice ☕\""""

ANONYMOUS_PROMPT_SUFFIX = (
    "\n\nNo user data available yet. Encourage them to share media through "
    "CarbonPrint to start tracking their footprint!"
)


class ChatProviderError(Exception):
    """Upstream chat call failed. status_code is None for transport errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class UserChatContext:
    username: str
    co2_emitted: float
    green_points: int
    total_data_used_mb: float
    # Weekly grams, newest week first
    weekly_grams: List[float] = field(default_factory=list)


@dataclass
class ChatResult:
    reply: Optional[str] = None
    error: Optional[str] = None
    fallback: Optional[str] = None
    status_code: int = 200

    @property
    def ok(self) -> bool:
        return self.reply is not None

    def to_payload(self) -> Dict[str, Any]:
        if self.ok:
            return {"reply": self.reply}
        return {"error": self.error, "fallback": self.fallback}


class ChatProvider(ABC):
    @abstractmethod
    def complete(self, messages: List[Dict[str, str]]) -> Optional[str]:
        """Return the assistant text, or None when the provider answered with no content.

        Raises ChatProviderError on any failure.
        """


class GatewayChatProvider(ChatProvider):
    """OpenAI-compatible chat gateway reached through the OpenAI client."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str],
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 300,
        timeout: int = 30,
        client: Optional[OpenAI] = None,
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings) -> "GatewayChatProvider":
        return cls(
            base_url=settings.AI_GATEWAY_URL,
            api_key=settings.AI_GATEWAY_API_KEY,
            model=settings.AI_MODEL,
            temperature=settings.AI_TEMPERATURE,
            max_tokens=settings.AI_MAX_TOKENS,
            timeout=settings.EXTERNAL_API_TIMEOUT,
        )

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            # One attempt per message
            self._client = OpenAI(
                base_url=self.base_url,
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    def complete(self, messages: List[Dict[str, str]]) -> Optional[str]:
        if not self.api_key:
            raise ChatProviderError("AI_GATEWAY_API_KEY is not configured")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.APIStatusError as e:
            logger.error(f"AI gateway error: {e.status_code} {e.message[:500]}")
            raise ChatProviderError(f"AI gateway error: {e.status_code}", status_code=e.status_code)
        except openai.OpenAIError as e:
            raise ChatProviderError(f"AI gateway request failed: {e}")

        try:
            if not response.choices:
                return None
            content = response.choices[0].message.content
        except (AttributeError, IndexError, KeyError, TypeError) as e:
            raise ChatProviderError(f"AI gateway returned an unexpected payload: {e}")
        if content is not None and not isinstance(content, str):
            raise ChatProviderError("AI gateway returned non-text content")
        return content or None


def build_system_prompt(context: Optional[UserChatContext]) -> str:
    if context is None:
        return BASE_SYSTEM_PROMPT + ANONYMOUS_PROMPT_SUFFIX

    prompt = (
        BASE_SYSTEM_PROMPT
        + f"\n\nUser stats for {context.username}:"
        + f"\n- Total CO₂: {context.co2_emitted}g ({context.co2_emitted / 1000:.2f} kg)"
        + f"\n- Green Points: {context.green_points}"
        + f"\n- Data Used: {context.total_data_used_mb}MB"
    )
    if context.weekly_grams:
        this_week = context.weekly_grams[0]
        prompt += f"\n- This Week: {this_week}g CO₂"
        if len(context.weekly_grams) > 1:
            change = week_over_week(this_week, context.weekly_grams[1])
            prompt += f"\n- Change from last week: {percent_change_label(change)}"
            if change.percent_change < 0:
                prompt += "\n(Great job reducing emissions!)"
    return prompt


class ChatAssistant:
    def __init__(self, provider: ChatProvider):
        self.provider = provider

    def reply(self, message: str, context: Optional[UserChatContext] = None) -> ChatResult:
        messages = [
            {"role": "system", "content": build_system_prompt(context)},
            {"role": "user", "content": message},
        ]
        try:
            text = self.provider.complete(messages)
        except ChatProviderError as e:
            if e.status_code == 429:
                return ChatResult(error=RATE_LIMITED_ERROR, fallback=RATE_LIMITED_FALLBACK, status_code=429)
            if e.status_code == 402:
                return ChatResult(error=PAYMENT_REQUIRED_ERROR, fallback=PAYMENT_REQUIRED_FALLBACK, status_code=402)
            logger.error(f"Chat relay failed: {e}")
            return ChatResult(error=str(e), fallback=GENERIC_FALLBACK, status_code=500)
        except Exception as e:
            logger.exception(f"Unexpected chat provider failure: {e}")
            return ChatResult(error="Chat provider failed", fallback=GENERIC_FALLBACK, status_code=500)

        return ChatResult(reply=text or NO_REPLY_FALLBACK)
