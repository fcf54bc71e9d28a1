"""Voice analysis data models.

Fragments come straight from the generation model and are validated
leniently: unknown keys are kept, ``None`` collections become empty and
non-numeric sentence lengths are dropped. Structural problems (wrong types
for the top-level sections) still fail validation.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_TONE = "Varied"

TEMPLATE_CATEGORIES = ("hooks", "bridges", "ctas", "nuggets")


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_json_dict(self) -> dict[str, Any]:
        """Dump with camelCase keys, as handed to downstream services."""
        return self.model_dump(by_alias=True, mode="json")


def _string_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, dict):
        return [str(k) for k in value]
    if isinstance(value, (list, tuple)):
        return [item for item in value if isinstance(item, str)]
    return value


class TemplateItem(_CamelModel):
    """A generalized, bracket-variable template extracted from one transcript."""

    pattern: str = Field(default="", description="Template with [VARIABLES]")
    variables: list[str] = Field(default_factory=list)
    source_index: int | None = Field(
        default=None, description="1-based index of the producing transcript"
    )
    structure: str | None = Field(default=None, description="Nugget delivery structure")

    @field_validator("variables", mode="before")
    @classmethod
    def _coerce_variables(cls, value: Any) -> Any:
        return _string_list(value)


class TemplateSet(_CamelModel):
    """Templates grouped by script section."""

    hooks: list[TemplateItem] = Field(default_factory=list)
    bridges: list[TemplateItem] = Field(default_factory=list)
    ctas: list[TemplateItem] = Field(default_factory=list)
    nuggets: list[TemplateItem] = Field(default_factory=list)

    @field_validator("hooks", "bridges", "ctas", "nuggets", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def category(self, name: str) -> list[TemplateItem]:
        """Return the template list for a category name."""
        if name not in TEMPLATE_CATEGORIES:
            raise KeyError(f"Unknown template category: {name}")
        return getattr(self, name)

    @property
    def total(self) -> int:
        return sum(len(self.category(name)) for name in TEMPLATE_CATEGORIES)


class StyleSignature(_CamelModel):
    """Recurring vocabulary, sentence length and tone of a creator."""

    power_words: list[str] = Field(default_factory=list)
    filler_phrases: list[str] = Field(default_factory=list)
    transition_phrases: list[str] = Field(default_factory=list)
    avg_words_per_sentence: float | None = None
    tone: str = DEFAULT_TONE

    @field_validator("power_words", "filler_phrases", "transition_phrases", mode="before")
    @classmethod
    def _coerce_phrases(cls, value: Any) -> Any:
        return _string_list(value)

    @field_validator("avg_words_per_sentence", mode="before")
    @classmethod
    def _numeric_only(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return value

    @field_validator("tone", mode="before")
    @classmethod
    def _default_tone(cls, value: Any) -> Any:
        if not isinstance(value, str) or not value.strip():
            return DEFAULT_TONE
        return value


class TranscriptBreakdown(_CamelModel):
    """Per-transcript section breakdown (hook, bridge, nugget, CTA)."""

    index: int | None = Field(default=None, description="1-based transcript index")
    hook: dict[str, Any] | None = None
    bridge: dict[str, Any] | None = None
    golden_nugget: dict[str, Any] | None = None
    cta: dict[str, Any] | None = None
    micro_hooks: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("micro_hooks", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class AnalysisFragment(_CamelModel):
    """Raw output of one batch call, indexed locally from 1."""

    templates: TemplateSet = Field(default_factory=TemplateSet)
    style_signature: StyleSignature = Field(default_factory=StyleSignature)
    transcripts: list[TranscriptBreakdown] = Field(default_factory=list)

    @field_validator("templates", "style_signature", mode="before")
    @classmethod
    def _none_to_default(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("transcripts", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class CombinedAnalysis(AnalysisFragment):
    """Globally indexed merge of every fragment of one run."""

    @property
    def template_counts(self) -> dict[str, int]:
        return {name: len(self.templates.category(name)) for name in TEMPLATE_CATEGORIES}
