"""Core data models for the newsdesk report pipeline."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum

MIN_FACTS_LENGTH = 10
MIN_CORPUS_LENGTH = 200
MAX_CORPUS_LENGTH = 20000
MAX_HEADLINE_LENGTH = 200
MIN_BODY_LENGTH = 10
MAX_ANGLES = 2


class Country(StrEnum):
    """Countries the pipeline publishes for (ISO 3166-1 alpha-2)."""

    US = "us"
    FR = "fr"

    @classmethod
    def parse(cls, value: str) -> "Country":
        try:
            return cls(value.strip().lower())
        except ValueError:
            supported = ", ".join(c.value for c in cls)
            raise ValueError(f"Invalid country: {value}. Supported: {supported}") from None


class Language(StrEnum):
    """Languages the pipeline publishes in (ISO 639-1)."""

    EN = "en"
    FR = "fr"

    @classmethod
    def parse(cls, value: str) -> "Language":
        try:
            return cls(value.strip().lower())
        except ValueError:
            supported = ", ".join(lang.value for lang in cls)
            raise ValueError(f"Invalid language: {value}. Supported: {supported}") from None


class Category(StrEnum):
    """Editorial category of a report or article.

    Unknown labels fall back to ``OTHER`` rather than failing, since agents
    occasionally invent categories.
    """

    POLITICS = "politics"
    BUSINESS = "business"
    TECHNOLOGY = "technology"
    SCIENCE = "science"
    HEALTH = "health"
    ENVIRONMENT = "environment"
    SOCIETY = "society"
    ENTERTAINMENT = "entertainment"
    SPORTS = "sports"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> "Category":
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.OTHER


class Stance(StrEnum):
    """Stance of an angle toward the reported event."""

    SUPPORTIVE = "supportive"
    CRITICAL = "critical"
    NEUTRAL = "neutral"
    MIXED = "mixed"
    CONCERNED = "concerned"
    OPTIMISTIC = "optimistic"
    SKEPTICAL = "skeptical"


class Discourse(StrEnum):
    """Where a viewpoint sits in public discourse.

    - ``mainstream``: main viewpoint of consensual media.
    - ``alternative``: opposite side, still within traditional media debate.
    - ``underreported``: found mostly outside traditional media coverage.
    - ``dubious``: questionable claims of doubtful validity.
    """

    MAINSTREAM = "mainstream"
    ALTERNATIVE = "alternative"
    UNDERREPORTED = "underreported"
    DUBIOUS = "dubious"


class Tier(StrEnum):
    """Audience tier assigned to a report by the classification stage."""

    GENERAL = "general"
    NICHE = "niche"
    OFF_TOPIC = "off_topic"


PUBLISHABLE_TIERS: tuple[Tier, ...] = (Tier.GENERAL, Tier.NICHE)


class ClassificationState(StrEnum):
    PENDING = "pending"
    COMPLETE = "complete"


class DeduplicationState(StrEnum):
    PENDING = "pending"
    COMPLETE = "complete"


class AuthenticityStatus(StrEnum):
    AUTHENTIC = "authentic"
    FABRICATED = "fabricated"


@dataclass(frozen=True)
class Categories:
    """Ordered, non-empty set of categories. The first one is the primary."""

    values: tuple[Category, ...]

    def __post_init__(self) -> None:
        if not self.values:
            raise ValueError("At least one category is required")
        if len(set(self.values)) != len(self.values):
            raise ValueError("Categories must be unique")

    @classmethod
    def from_strings(cls, raw: list[str] | tuple[str, ...]) -> "Categories":
        """Parse category labels, dropping repeats after normalization."""
        parsed: list[Category] = []
        for label in raw:
            category = Category.parse(label)
            if category not in parsed:
                parsed.append(category)
        return cls(values=tuple(parsed))

    @property
    def primary(self) -> Category:
        return self.values[0]

    def contains(self, category: Category | str) -> bool:
        return Category.parse(str(category)) in self.values

    def __len__(self) -> int:
        return len(self.values)

    def __str__(self) -> str:
        return ", ".join(c.value for c in self.values)


@dataclass(frozen=True)
class Headline:
    value: str

    def __post_init__(self) -> None:
        stripped = self.value.strip()
        if not stripped:
            raise ValueError("Headline cannot be empty")
        if len(stripped) > MAX_HEADLINE_LENGTH:
            raise ValueError(f"Headline cannot exceed {MAX_HEADLINE_LENGTH} characters")
        object.__setattr__(self, "value", stripped)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Body:
    value: str

    def __post_init__(self) -> None:
        stripped = self.value.strip()
        if len(stripped) < MIN_BODY_LENGTH:
            raise ValueError(f"Body must be at least {MIN_BODY_LENGTH} characters long")
        object.__setattr__(self, "value", stripped)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Traits:
    """Content traits assigned during classification."""

    smart: bool = False
    uplifting: bool = False

    def has_any(self) -> bool:
        return self.smart or self.uplifting


@dataclass(frozen=True)
class ReportAngle:
    """One distinct editorial viewpoint on a report.

    ``corpus`` is the exhaustive compiled text for the viewpoint, not a
    summary: every argument, quote and piece of evidence the sources carry
    for that stance.
    """

    corpus: str
    stance: Stance
    discourse: Discourse | None = None

    def __post_init__(self) -> None:
        length = len(self.corpus)
        if length < MIN_CORPUS_LENGTH:
            raise ValueError(f"Angle corpus must be at least {MIN_CORPUS_LENGTH} characters long")
        if length > MAX_CORPUS_LENGTH:
            raise ValueError(f"Angle corpus cannot exceed {MAX_CORPUS_LENGTH} characters")


@dataclass(frozen=True)
class Report:
    """One real-world event distilled from two or more source articles.

    Classification and deduplication are independent one-way state machines
    (``pending`` -> ``complete``). A report resolved as a duplicate keeps
    ``duplicate_of`` pointing at the canonical report and is never surfaced
    on its own.
    """

    id: str
    categories: Categories
    country: Country
    dateline: datetime
    facts: str
    angles: tuple[ReportAngle, ...]
    source_references: tuple[str, ...]
    created_at: datetime
    updated_at: datetime
    classification_state: ClassificationState = ClassificationState.PENDING
    deduplication_state: DeduplicationState = DeduplicationState.PENDING
    tier: Tier | None = None
    traits: Traits = field(default_factory=Traits)
    duplicate_of: str | None = None

    def __post_init__(self) -> None:
        if len(self.facts.strip()) < MIN_FACTS_LENGTH:
            raise ValueError(f"Report facts must be at least {MIN_FACTS_LENGTH} characters long")
        if not self.angles:
            raise ValueError("A report needs at least one angle")
        if len(self.angles) > MAX_ANGLES:
            raise ValueError(f"A report cannot have more than {MAX_ANGLES} angles")
        if not self.source_references:
            raise ValueError("A report needs at least one source reference")
        if len(set(self.source_references)) != len(self.source_references):
            raise ValueError("Source references must be unique within a report")
        if self.duplicate_of is not None and self.duplicate_of == self.id:
            raise ValueError("A report cannot be a duplicate of itself")

    @property
    def is_publishable(self) -> bool:
        return self.tier in PUBLISHABLE_TIERS

    @property
    def is_duplicate(self) -> bool:
        return self.duplicate_of is not None

    def with_source_references(self, source_ids: list[str], *, updated_at: datetime) -> "Report":
        """Return a copy with ``source_ids`` appended, skipping known ids."""
        merged = list(self.source_references)
        for source_id in source_ids:
            if source_id not in merged:
                merged.append(source_id)
        return replace(self, source_references=tuple(merged), updated_at=updated_at)


@dataclass(frozen=True)
class Authenticity:
    """Whether an article is real, and if not, why it is misleading."""

    status: AuthenticityStatus = AuthenticityStatus.AUTHENTIC
    clarification: str | None = None

    def __post_init__(self) -> None:
        if self.status is AuthenticityStatus.FABRICATED:
            if not self.clarification or not self.clarification.strip():
                raise ValueError("Fabricated articles must include a clarification")
        elif self.clarification is not None:
            raise ValueError("Authentic articles cannot carry a clarification")

    @classmethod
    def authentic(cls) -> "Authenticity":
        return cls()

    @classmethod
    def fabricated(cls, clarification: str) -> "Authenticity":
        return cls(status=AuthenticityStatus.FABRICATED, clarification=clarification)

    @property
    def is_fabricated(self) -> bool:
        return self.status is AuthenticityStatus.FABRICATED

    def __str__(self) -> str:
        if self.is_fabricated:
            return f"Fabricated article (Clarification: {self.clarification})"
        return "Authentic article"


@dataclass(frozen=True)
class ArticleFrame:
    """Angle-specific rendering of an article, mirroring a report angle."""

    headline: Headline
    body: Body
    stance: Stance | None = None
    discourse: Discourse | None = None


@dataclass(frozen=True)
class ArticleQuizQuestion:
    question: str
    answers: tuple[str, ...]
    correct_answer_index: int

    def __post_init__(self) -> None:
        if not 10 <= len(self.question) <= 500:
            raise ValueError("Quiz question must be between 10 and 500 characters")
        if not 2 <= len(self.answers) <= 6:
            raise ValueError("Quiz questions need between 2 and 6 answers")
        if any(not 1 <= len(answer) <= 200 for answer in self.answers):
            raise ValueError("Quiz answers must be between 1 and 200 characters")
        if not 0 <= self.correct_answer_index < len(self.answers):
            raise ValueError(
                f"correct_answer_index ({self.correct_answer_index}) must be less than "
                f"answers length ({len(self.answers)})"
            )

    @property
    def correct_answer(self) -> str:
        return self.answers[self.correct_answer_index]

    def is_correct(self, answer_index: int) -> bool:
        return answer_index == self.correct_answer_index


@dataclass(frozen=True)
class Article:
    """A published, user-facing article, authentic or fabricated."""

    id: str
    headline: Headline
    body: Body
    categories: Categories
    country: Country
    language: Language
    authenticity: Authenticity
    published_at: datetime
    frames: tuple[ArticleFrame, ...] = ()
    report_ids: tuple[str, ...] = ()
    traits: Traits = field(default_factory=Traits)
    quiz_questions: tuple[ArticleQuizQuestion, ...] = ()

    def __post_init__(self) -> None:
        if self.authenticity.is_fabricated and self.report_ids:
            raise ValueError("Fabricated articles cannot link to reports")

    @property
    def is_fabricated(self) -> bool:
        return self.authenticity.is_fabricated


@dataclass(frozen=True)
class NewsArticle:
    """A single source article as returned by a news provider.

    ``id`` is provider-namespaced (e.g. ``"worldnewsapi:123"``) so it can be
    compared against stored source references.
    """

    id: str
    headline: str
    body: str


@dataclass(frozen=True)
class NewsCluster:
    """A group of source articles covering the same event."""

    articles: tuple[NewsArticle, ...]
    published_at: datetime

    @property
    def source_ids(self) -> list[str]:
        return [article.id for article in self.articles]


@dataclass(frozen=True)
class ReportDigest:
    """Compact view of a report used as deduplication context."""

    id: str
    facts: str
