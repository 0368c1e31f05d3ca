from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..models import Article
from ..utils.logging import get_logger
from ..utils.settings import EngineSettings
from .ai import AIClient
from .ai.parsing import parse_briefing_response

logger = get_logger("nse.processors.narrative")

HIGH_VOLATILITY = 60
HEADLINE_IMPACT = 80
PROMPT_ARTICLES = 12


@dataclass(slots=True)
class BriefingDraft:
    """Aggregates computed for a briefing window, handed to narrators."""

    asset: str
    hours: int
    posture: str
    sentiment: str
    impact_score: int
    volatility_score: int
    mean_bias: float
    bullish: int
    bearish: int
    neutral: int
    high_impact: List[Article] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.bullish + self.bearish + self.neutral


@dataclass(slots=True)
class Narrative:
    briefing: str
    strategy_hints: List[str]


# A narrator turns the windowed articles plus their aggregates into prose.
# It may raise or block; callers time-box it and fall back to the template.
Narrator = Callable[[Sequence[Article], BriefingDraft], Narrative]


def template_narrative(draft: BriefingDraft) -> Narrative:
    lines = [
        f"{draft.asset} briefing, last {draft.hours}h: {draft.total} stories "
        f"({draft.bullish} bullish, {draft.bearish} bearish, {draft.neutral} neutral).",
        f"Net posture: {draft.posture}. Average impact {draft.impact_score}/100, "
        f"volatility {draft.volatility_score}/100.",
    ]
    if draft.high_impact:
        top = draft.high_impact[0]
        lines.append(f"Top story: {top.title} ({top.source}, impact {top.impact_score}).")

    posture = draft.posture.lower()
    hints: List[str] = []
    if "risk-off" in posture:
        hints.append("Bearish news flow dominates: consider tighter stop-losses and smaller position sizes.")
    elif "risk-on" in posture:
        hints.append("Positive news flow: scale into entries gradually rather than chasing spikes.")
    else:
        hints.append("Mixed signals: favour range strategies and wait for confirmation before adding exposure.")
    if draft.volatility_score >= HIGH_VOLATILITY:
        hints.append("Elevated volatility expected: widen stops or reduce leverage to avoid noise-driven exits.")
    if draft.high_impact and draft.high_impact[0].impact_score >= HEADLINE_IMPACT:
        hints.append(f"High-impact headline in the window: re-check open orders around \"{draft.high_impact[0].title}\".")
    hints.append("Paper-trade new setups first and never risk more than you can afford to lose.")
    return Narrative(briefing="\n".join(lines), strategy_hints=hints)


def _build_briefing_prompt(articles: Sequence[Article], draft: BriefingDraft) -> str:
    headlines = [
        {
            "title": a.title,
            "source": a.source,
            "sentiment": a.sentiment,
            "impact": a.impact_score,
            "volatility": a.volatility_score,
            "bias": a.bias_score,
        }
        for a in sorted(articles, key=lambda a: -a.impact_score)[:PROMPT_ARTICLES]
    ]
    stats = {
        "asset": draft.asset,
        "hours": draft.hours,
        "posture": draft.posture,
        "sentiment": draft.sentiment,
        "impactScore": draft.impact_score,
        "volatilityScore": draft.volatility_score,
        "counts": {"bullish": draft.bullish, "bearish": draft.bearish, "neutral": draft.neutral},
    }
    return (
        "You are a cautious crypto market analyst writing for retail traders.\n"
        "Write a short market briefing (3-5 sentences) for the window described in STATS, "
        "grounded only in the HEADLINES. Then give 2-4 risk-aware strategy hints; each hint "
        "must mention risk control (position size, stops, leverage or paper trading).\n"
        "Output MUST be a single JSON object with keys: briefing (string), strategyHints (array of strings).\n"
        "Do not include markdown, code fences, or extra text.\n\n"
        f"STATS:\n{json.dumps(stats)}\n\nHEADLINES:\n{json.dumps(headlines, ensure_ascii=False)}\n"
    )


class AINarrator:
    """Narrator backed by a text-generation client."""

    def __init__(self, client: AIClient, *, timeout: float = 5.0) -> None:
        self.client = client
        self.timeout = timeout

    def __call__(self, articles: Sequence[Article], draft: BriefingDraft) -> Narrative:
        prompt = _build_briefing_prompt(articles, draft)
        raw = self.client.generate(prompt, timeout=self.timeout)
        text, hints = parse_briefing_response(raw)
        if not hints:
            hints = template_narrative(draft).strategy_hints
        return Narrative(briefing=text, strategy_hints=hints)


def create_narrator(settings: EngineSettings) -> Optional[Narrator]:
    """Build the configured narrator, or ``None`` for template-only briefings."""
    backend = (settings.briefing_ai_backend or "none").lower()
    if backend in {"", "none", "off", "template"}:
        return None
    client: AIClient
    if backend == "ollama":
        from .ai.ollama import OllamaClient  # lazy import

        client = OllamaClient()
    elif backend == "gemini":
        from .ai.gemini import GeminiClient  # lazy import

        try:
            client = GeminiClient()
        except RuntimeError as exc:
            logger.warning("AI narrator unavailable (%s); briefings use the template", exc)
            return None
    else:
        logger.warning("Unsupported BRIEFING_AI_BACKEND '%s'; briefings use the template", backend)
        return None
    logger.info("Briefing narrator backend: %s", backend)
    return AINarrator(client, timeout=settings.briefing_ai_timeout)
