"""Claude-backed agents using structured JSON output."""

import json
import logging
import os
from typing import Any

import anthropic

from newsdesk.agents.base import (
    ArticleCompositionResult,
    ArticleFabricationResult,
    ComposedFrame,
    FabricationContext,
    FabricationTone,
    IngestedAngle,
    ReportClassificationResult,
    ReportDeduplicationResult,
    ReportIngestionResult,
)
from newsdesk.data import (
    MAX_ANGLES,
    Categories,
    Category,
    Country,
    Discourse,
    Language,
    NewsCluster,
    Report,
    ReportDigest,
    Stance,
    Tier,
    Traits,
)

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"

JSON_ONLY = "Respond ONLY with a JSON object (no markdown fences, no commentary)."

_LANGUAGE_NAMES = {Language.EN: "English", Language.FR: "French"}
_COUNTRY_NAMES = {Country.US: "the United States", Country.FR: "France"}


def _strip_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = [line for line in cleaned.split("\n") if not line.strip().startswith("```")]
        cleaned = "\n".join(lines)
    return cleaned


def _parse_traits(raw: object) -> Traits:
    if not isinstance(raw, dict):
        return Traits()
    return Traits(smart=bool(raw.get("smart", False)), uplifting=bool(raw.get("uplifting", False)))


def _parse_discourse(raw: object) -> Discourse | None:
    if raw is None:
        return None
    try:
        return Discourse(str(raw).lower())
    except ValueError:
        return None


def _cluster_to_prompt_text(cluster: NewsCluster) -> str:
    parts = []
    for i, article in enumerate(cluster.articles):
        parts.append(f"Article {i + 1}:\n  Headline: {article.headline}\n  Body: {article.body}")
    return "\n\n".join(parts)


class _ClaudeAgent:
    """Shared Anthropic client handling for the JSON agents.

    Args:
        model: Anthropic model to use.
        api_key: API key (defaults to CLAUDE_API_KEY env var).
        max_tokens: Response token limit.
    """

    name = "ClaudeAgent"

    def __init__(
        self,
        *,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        max_tokens: int = 4096,
    ) -> None:
        resolved_key = api_key or os.environ.get("CLAUDE_API_KEY")
        self._client = anthropic.AsyncAnthropic(api_key=resolved_key)
        self._model = model
        self._max_tokens = max_tokens

    async def _complete_json(self, system: str, user_prompt: str) -> dict[str, Any]:
        """Send one message and decode the JSON object it returns.

        Raises:
            anthropic.APIError: If the API call fails.
            ValueError: If the response is not a JSON object.
        """
        response = await self._client.messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            system=system,
            messages=[{"role": "user", "content": user_prompt}],
        )

        response_text = ""
        for block in response.content:
            if hasattr(block, "text"):
                response_text += block.text

        parsed = json.loads(_strip_fences(response_text))
        if not isinstance(parsed, dict):
            raise ValueError(f"{self.name} response is not a JSON object")
        return parsed


class ClaudeReportIngestionAgent(_ClaudeAgent):
    """Distill a news cluster into facts, categories and angles using Claude."""

    name = "ReportIngestionAgent"

    SYSTEM_PROMPT = f"""\
You are an investigative journalist and media analyst. Given several news \
articles about a single event, deconstruct them into a structured brief. \
Base your analysis only on the provided text and do not judge viewpoints. \
Write in English. {JSON_ONLY}

The object has these fields:
- "facts": comprehensive, neutral account of what happened, who was involved, \
where and when
- "categories": array of 1-3 of: politics, business, technology, science, \
health, environment, society, entertainment, sports, other (most relevant first)
- "angles": array of 1-2 genuinely distinct viewpoints on the event. Each has:
  - "corpus": complete compilation (not a summary) of every argument, fact and \
piece of evidence for that viewpoint, 200 to 20000 characters, never about the \
publications themselves
  - "stance": one of supportive, critical, neutral, mixed, concerned, \
optimistic, skeptical
  - "discourse": "mainstream" for the dominant media narrative or \
"alternative" for its primary contradiction
- "traits": {{"smart": true if intellectually enriching, "uplifting": true if \
positive or inspiring}}

If several sources make the same core argument, they form ONE angle.\
"""

    async def run(self, *, news_cluster: NewsCluster) -> ReportIngestionResult | None:
        user_prompt = "News articles to analyze:\n\n" + _cluster_to_prompt_text(news_cluster)
        try:
            raw = await self._complete_json(self.SYSTEM_PROMPT, user_prompt)
            result = self._parse(raw)
        except (anthropic.APIError, ValueError, TypeError) as e:
            logger.warning("%s failed for cluster %s: %s", self.name, news_cluster.source_ids, e)
            return None
        logger.info("%s extracted %d angles", self.name, len(result.angles))
        return result

    def _parse(self, raw: dict[str, Any]) -> ReportIngestionResult:
        facts = str(raw.get("facts", "")).strip()
        if not facts:
            raise ValueError("missing facts")

        raw_categories = raw.get("categories") or [raw.get("category", "other")]
        if not isinstance(raw_categories, list):
            raw_categories = [raw_categories]
        categories = Categories.from_strings([str(c) for c in raw_categories])

        angles: list[IngestedAngle] = []
        raw_angles = raw.get("angles", [])
        if isinstance(raw_angles, list):
            for item in raw_angles:
                if not isinstance(item, dict):
                    continue
                try:
                    stance = Stance(str(item.get("stance", "")).lower())
                except ValueError:
                    stance = Stance.NEUTRAL
                angles.append(
                    IngestedAngle(
                        corpus=str(item.get("corpus", "")),
                        stance=stance,
                        discourse=_parse_discourse(item.get("discourse")),
                    )
                )
        if not angles:
            raise ValueError("no angles in response")
        if len(angles) > MAX_ANGLES:
            raise ValueError(f"too many angles: {len(angles)} > {MAX_ANGLES}")

        return ReportIngestionResult(
            facts=facts,
            categories=categories,
            angles=tuple(angles),
            traits=_parse_traits(raw.get("traits")),
        )


class ClaudeReportDeduplicationAgent(_ClaudeAgent):
    """Decide whether a report repeats a known event using Claude."""

    name = "ReportDeduplicationAgent"

    SYSTEM_PROMPT = f"""\
You are a meticulous news editor preventing duplicate coverage. You receive a \
list of existing reports (id and facts) and one new report. Decide whether the \
new report describes the SAME underlying event as one of the existing reports. \
{JSON_ONLY}

Compare the essential elements of each event:
- Actors: the same key people, organizations or countries
- Action: the same core thing that happened
- Time or location: the same moment or place

Substantial overlap on these elements means the reports are duplicates, even \
when the wording, focus or level of detail differs. Follow-ups with a new \
development, related events and different events on the same topic are NOT \
duplicates.

Be conservative: when in doubt about substantial overlap, mark the new report \
as a duplicate.

The object has one field:
- "duplicate_of_report_id": id of the existing report describing the same \
event, or null if the new report is unique\
"""

    async def run(
        self,
        *,
        existing_reports: list[ReportDigest],
        new_report: NewsCluster | Report,
    ) -> ReportDeduplicationResult | None:
        existing = json.dumps([{"id": r.id, "facts": r.facts} for r in existing_reports], indent=2)
        if isinstance(new_report, Report):
            candidate = f"Facts: {new_report.facts}"
        else:
            candidate = _cluster_to_prompt_text(new_report)
        user_prompt = f"Existing reports:\n{existing}\n\nNew report:\n{candidate}"

        try:
            raw = await self._complete_json(self.SYSTEM_PROMPT, user_prompt)
        except (anthropic.APIError, ValueError, TypeError) as e:
            logger.warning("%s failed: %s", self.name, e)
            return None

        duplicate_of = raw.get("duplicate_of_report_id")
        if duplicate_of is not None and not isinstance(duplicate_of, str):
            duplicate_of = str(duplicate_of)
        return ReportDeduplicationResult(duplicate_of_report_id=duplicate_of or None)


class ClaudeReportClassificationAgent(_ClaudeAgent):
    """Assign an audience tier and traits to a report using Claude."""

    name = "ReportClassificationAgent"

    SYSTEM_PROMPT = f"""\
You are the senior editor of a digital newsroom. Decide which audience tier a \
report belongs to. {JSON_ONLY}

Tiers:
- "general": broad mainstream appeal, timely and important for most readers \
(national elections, major policy changes, championship finals)
- "niche": valuable to a specific community but of limited mainstream interest \
(minor league results, specialised tech releases)
- "off_topic": no real news value (game guides, listicles, promotions, opinion \
without factual basis)

The object has these fields:
- "classification": exactly one tier
- "reason": one concise sentence referencing the audience or content nature
- "traits": {{"smart": true if intellectually enriching, "uplifting": true if \
positive or inspiring}}\
"""

    async def run(self, *, report: Report) -> ReportClassificationResult | None:
        report_data = {
            "categories": [c.value for c in report.categories.values],
            "facts": report.facts,
            "angles": [
                {
                    "corpus": a.corpus,
                    "stance": a.stance.value,
                    "discourse": a.discourse.value if a.discourse else None,
                }
                for a in report.angles
            ],
        }
        user_prompt = "Report to classify:\n" + json.dumps(report_data, indent=2)

        try:
            raw = await self._complete_json(self.SYSTEM_PROMPT, user_prompt)
            tier = Tier(str(raw.get("classification", "")).lower())
        except (anthropic.APIError, ValueError, TypeError) as e:
            logger.warning("%s failed for report %s: %s", self.name, report.id, e)
            return None

        reason = str(raw.get("reason", ""))
        logger.info("%s classified report %s as %s: %s", self.name, report.id, tier, reason)
        return ReportClassificationResult(
            classification=tier,
            reason=reason,
            traits=_parse_traits(raw["traits"]) if "traits" in raw else None,
        )


class ClaudeArticleCompositionAgent(_ClaudeAgent):
    """Write a neutral article and one frame per angle using Claude."""

    name = "ArticleCompositionAgent"

    SYSTEM_PROMPT = f"""\
You are a news writer producing a neutral article from a verified report, \
plus one framed rewrite per viewpoint of the report. Use only the provided \
facts and angles. Never start a body with a dateline. {JSON_ONLY}

The object has these fields:
- "headline": neutral headline, at most 200 characters
- "body": neutral article body of about 150-250 words
- "frames": array with exactly one object per angle, in the same order as the \
angles. Each has "headline" and "body", written from that angle's perspective\
"""

    async def run(
        self,
        *,
        report: Report,
        target_country: Country,
        target_language: Language,
    ) -> ArticleCompositionResult | None:
        report_data = {
            "facts": report.facts,
            "angles": [{"corpus": a.corpus, "stance": a.stance.value} for a in report.angles],
        }
        user_prompt = (
            f"Write for readers in {_COUNTRY_NAMES[target_country]}. "
            f"All output MUST be in {_LANGUAGE_NAMES[target_language]}.\n"
            f"The report has {len(report.angles)} angles.\n\n"
            "Report:\n" + json.dumps(report_data, indent=2)
        )

        try:
            raw = await self._complete_json(self.SYSTEM_PROMPT, user_prompt)
            raw_frames = raw.get("frames", [])
            if not isinstance(raw_frames, list):
                raise ValueError("frames is not a list")
            frames = []
            for i, item in enumerate(raw_frames):
                angle = report.angles[i] if i < len(report.angles) else None
                frames.append(
                    ComposedFrame(
                        headline=str(item["headline"]),
                        body=str(item["body"]),
                        stance=angle.stance if angle else None,
                        discourse=angle.discourse if angle else None,
                    )
                )
            result = ArticleCompositionResult(
                headline=str(raw["headline"]),
                body=str(raw["body"]),
                frames=tuple(frames),
            )
        except (anthropic.APIError, KeyError, ValueError, TypeError) as e:
            logger.warning("%s failed for report %s: %s", self.name, report.id, e)
            return None
        return result


class ClaudeArticleFabricationAgent(_ClaudeAgent):
    """Fabricate a clearly-labeled fake article for the detection game using Claude."""

    name = "ArticleFabricationAgent"

    SYSTEM_PROMPT = f"""\
You write convincing but entirely fictional news articles for an educational \
fake-news detection game. Readers try to spot the fake; afterwards they read \
your clarification explaining how it misleads.

Rules:
- The story is 100% fictional: no real events, and never targets real private \
individuals or vulnerable groups
- Journalistic voice with at least two concrete, plausible details and one \
quote attributed to a fictional expert or agency
- Never reveal inside the article that it is fake
- Body of about 200 words, never starting with a dateline
- Match the headline length of the recent articles
- Satirical tone: dead-pan absurd premise delivered straight, punching upward. \
Serious tone: plausible misinformation that could pass as real reporting

{JSON_ONLY}

The object has these fields:
- "headline": article headline
- "body": article body
- "clarification": explanation of why and how the article is misleading
- "category": one of politics, business, technology, science, health, \
environment, society, entertainment, sports, other
- "tone": "serious" or "satirical"
- "insert_after_index": index of the recent article (0 = newest) the fake \
article should follow chronologically, or -1 if there are none\
"""

    async def run(
        self,
        *,
        target_country: Country,
        target_language: Language,
        context: FabricationContext,
        tone: FabricationTone | None = None,
        target_category: Category | None = None,
    ) -> ArticleFabricationResult | None:
        recent = [
            {
                "index": i,
                "headline": a.headline,
                "body": a.body,
                "published_at": a.published_at.isoformat(),
                "frames": [{"headline": h, "body": b} for h, b in a.frames],
            }
            for i, a in enumerate(context.recent_articles)
        ]
        user_prompt = (
            f"Current date: {context.current_date.isoformat()}\n"
            f"Target audience: readers in {_COUNTRY_NAMES[target_country]}. "
            f"All output MUST be in {_LANGUAGE_NAMES[target_language]}.\n"
        )
        if tone:
            user_prompt += f"Tone: {tone}\n"
        if target_category:
            user_prompt += f"Category: {target_category.value}\n"
        user_prompt += "\nRecent articles (newest first):\n" + json.dumps(recent, indent=2)

        try:
            raw = await self._complete_json(self.SYSTEM_PROMPT, user_prompt)
            result = self._parse(raw, tone=tone, target_category=target_category)
        except (anthropic.APIError, KeyError, ValueError, TypeError) as e:
            logger.warning("%s failed: %s", self.name, e)
            return None
        return result

    def _parse(
        self,
        raw: dict[str, Any],
        *,
        tone: FabricationTone | None,
        target_category: Category | None,
    ) -> ArticleFabricationResult:
        clarification = str(raw.get("clarification", "")).strip()
        if not clarification:
            raise ValueError("missing clarification")

        raw_tone = str(raw.get("tone", "")).lower()
        resolved_tone: FabricationTone = tone or (
            "serious" if raw_tone == "serious" else "satirical"
        )

        insert_after_index = raw.get("insert_after_index", -1)
        if not isinstance(insert_after_index, int) or isinstance(insert_after_index, bool):
            insert_after_index = -1

        return ArticleFabricationResult(
            headline=str(raw["headline"]),
            body=str(raw["body"]),
            clarification=clarification,
            category=target_category or Category.parse(str(raw.get("category", "other"))),
            tone=resolved_tone,
            insert_after_index=insert_after_index,
        )
