"""Response draft generation.

``ResponseGenerator`` is the seam for inference backends. The shipped
``TemplateResponseGenerator`` picks a canned reply by rating band and then
reshapes it for the requested tone; it needs no network access.
"""

import asyncio
import logging
import random
import re
from dataclasses import dataclass
from typing import Protocol

from ..schemas.ai import Tone

logger = logging.getLogger(__name__)

CASUAL_EMOJI = "😊"
FRIENDLY_CLOSING = "Have a wonderful day!"

POSITIVE_TEMPLATES = (
    "Thank you so much for your wonderful review! We're thrilled to hear that you had such a positive experience with {business}. Your feedback means the world to us and motivates our team to continue providing excellent service. We look forward to serving you again soon!",
    "We're absolutely delighted by your {rating}-star review! It's fantastic to know that we exceeded your expectations. At {business}, we're committed to delivering exceptional experiences, and your kind words confirm we're on the right track. Thank you for choosing us!",
    "Your glowing review has made our day! We're so pleased that you enjoyed your experience with {business}. Our team works hard to provide outstanding service, and it's incredibly rewarding to see that reflected in your feedback. We can't wait to welcome you back!",
)

NEUTRAL_TEMPLATES = (
    "Thank you for taking the time to share your feedback about {business}. We appreciate your honest review and are always looking for ways to improve our service. We'd love the opportunity to exceed your expectations on your next visit. Please don't hesitate to reach out if there's anything specific we can do better.",
    "We appreciate your review and are glad you chose {business}. While we're pleased you had a decent experience, we're always striving to do better. Your feedback helps us identify areas for improvement. We hope to have the chance to provide you with an even better experience next time!",
    "Thank you for your feedback about your experience with {business}. We value all reviews as they help us grow and improve. We'd welcome the opportunity to discuss your visit further and show you the improvements we've been making. Please feel free to contact us directly.",
)

NEGATIVE_TEMPLATES = (
    "Thank you for bringing your concerns to our attention. We sincerely apologize that your experience with {business} didn't meet your expectations. Your feedback is invaluable in helping us improve our service. We'd appreciate the opportunity to discuss this further and make things right. Please contact us directly so we can address your concerns properly.",
    "We're truly sorry to hear about your disappointing experience at {business}. This is not the level of service we strive to provide, and we take your feedback very seriously. We'd like to learn more about what went wrong and work to resolve this issue. Please reach out to us directly so we can make this right.",
    "We apologize for falling short of your expectations during your visit to {business}. Your feedback is crucial for our improvement, and we're committed to addressing the issues you've raised. We'd value the opportunity to speak with you directly to understand how we can do better and regain your trust.",
)

# Each rule keeps the case of the first letter
_EXPANSIONS = (
    (r"\b([Ww])e're\b", r"\1e are"),
    (r"\b([Ww])e'd\b", r"\1e would"),
    (r"\b([Ww])e've\b", r"\1e have"),
    (r"\b([Ii])t's\b", r"\1t is"),
    (r"\b([Cc])an't\b", r"\1annot"),
    (r"\b([Dd])on't\b", r"\1o not"),
    (r"\b([Dd])idn't\b", r"\1id not"),
)

_CONTRACTIONS = (
    (r"\b([Ww])e are\b", r"\1e're"),
    (r"\b([Cc])annot\b", r"\1an't"),
    (r"\b([Dd])o not\b", r"\1on't"),
)


def rating_band(rating: int) -> str:
    if rating >= 4:
        return "positive"
    if rating == 3:
        return "neutral"
    return "negative"


TEMPLATES_BY_BAND = {
    "positive": POSITIVE_TEMPLATES,
    "neutral": NEUTRAL_TEMPLATES,
    "negative": NEGATIVE_TEMPLATES,
}


def expand_contractions(text: str) -> str:
    for pattern, replacement in _EXPANSIONS:
        text = re.sub(pattern, replacement, text)
    return text


def contract(text: str) -> str:
    for pattern, replacement in _CONTRACTIONS:
        text = re.sub(pattern, replacement, text)
    return text


def apply_tone(text: str, tone: Tone | str) -> str:
    tone = Tone(tone)
    if tone == Tone.FORMAL:
        return expand_contractions(text)
    if tone == Tone.CASUAL:
        return f"{contract(text)} {CASUAL_EMOJI}"
    if tone == Tone.FRIENDLY:
        return f"{text} {FRIENDLY_CLOSING}"
    return text


@dataclass
class ResponseContext:
    """Everything about the reply besides the review itself."""

    business_name: str
    platform: str | None = None
    custom_instructions: str | None = None


class ResponseGenerator(Protocol):
    async def generate(
        self,
        review_text: str,
        rating: int,
        tone: Tone | str,
        context: ResponseContext,
    ) -> str:
        ...


class TemplateResponseGenerator:
    """Canned-template generator with an optional simulated latency."""

    def __init__(self, rng: random.Random | None = None, delay_seconds: float = 0.0):
        self.rng = rng or random.Random()
        self.delay_seconds = delay_seconds

    def compose(self, rating: int, tone: Tone | str, context: ResponseContext) -> str:
        """Synchronous core of ``generate``."""
        template = self.rng.choice(TEMPLATES_BY_BAND[rating_band(rating)])
        response = template.format(business=context.business_name, rating=rating)
        response = apply_tone(response, tone)
        if context.custom_instructions:
            response += f"\n\n{context.custom_instructions}"
        return response

    async def generate(
        self,
        review_text: str,
        rating: int,
        tone: Tone | str,
        context: ResponseContext,
    ) -> str:
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        response = self.compose(rating, tone, context)
        logger.debug(
            f"Generated {Tone(tone).value} draft for a {rating}-star "
            f"{context.platform or 'unknown'} review ({len(review_text)} chars)"
        )
        return response
