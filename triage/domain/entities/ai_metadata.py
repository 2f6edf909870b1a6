"""AI metadata — the classification attached to a ticket."""

from dataclasses import dataclass, replace

from triage.domain.value_objects.enums import Language, RequestType, Tone

MIN_PRIORITY = 1
MAX_PRIORITY = 10

# Provenance tags
SOURCE_RULES = "Rules"
SOURCE_MODEL = "Gemini"
SOURCE_MODEL_HEURISTIC = "GeminiTextHeuristic"
RULES_FALLBACK_PREFIX = "RulesFallback"


def clamp_priority(value: int) -> int:
    return max(MIN_PRIORITY, min(MAX_PRIORITY, int(value)))


def fallback_source(reason: str) -> str:
    """Provenance tag for a rule result produced because the model path failed."""
    return f"{RULES_FALLBACK_PREFIX}({reason})"


@dataclass(frozen=True)
class AIMetadata:
    request_type: RequestType
    tone: Tone
    priority: int
    language: Language
    summary: str
    recommendation: str
    image_analysis: str = ""
    analysis_source: str = SOURCE_RULES

    def __post_init__(self) -> None:
        if not MIN_PRIORITY <= self.priority <= MAX_PRIORITY:
            raise ValueError(f"priority must be within [1, 10], got {self.priority}")
        if not self.analysis_source:
            raise ValueError("analysis_source must not be empty")

    @property
    def is_rule_based(self) -> bool:
        return self.analysis_source.startswith(SOURCE_RULES)

    def with_source(self, source: str) -> "AIMetadata":
        return replace(self, analysis_source=source)

    def to_dict(self) -> dict:
        return {
            "request_type": self.request_type.value,
            "tone": self.tone.value,
            "priority": self.priority,
            "language": self.language.value,
            "summary": self.summary,
            "recommendation": self.recommendation,
            "image_analysis": self.image_analysis,
            "analysis_source": self.analysis_source,
        }
