"""Domain models for the injected settings snapshot and tunables."""

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field


class ExtractionMode(str, Enum):
    """How aggressively the page is highlighted."""

    MINIMAL = "minimal"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class ScoringWeights(BaseModel):
    """Weights and threshold for the worthiness scorer.

    Defaults were tuned by hand against sample news and health pages; the
    calibration corpus under tests/ pins their current behaviour.
    """

    threshold: int = Field(default=40, description="Minimum score to accept a candidate")
    verb_structure: int = Field(default=15, description="Sentence has a finite verb")
    statistic_with_unit: int = Field(default=35, description="Number with a meaningful unit")
    bare_digits: int = Field(default=10, description="Digits without a recognised unit")
    authoritative_entity: int = Field(default=30, description="Mentions an authority or role")
    trigger_phrase: int = Field(default=30, description="Contains a claim-trigger phrase")
    substantive_length: int = Field(default=10, description="Length within the substantive band")
    substantive_min_length: int = Field(default=80, description="Lower bound of the substantive band")
    substantive_max_length: int = Field(default=300, description="Upper bound of the substantive band")

    no_terminal_punctuation: int = Field(default=-20, description="Missing terminal punctuation")
    question: int = Field(default=-50, description="Contains a question mark")
    imperative_opening: int = Field(default=-40, description="Starts with a command verb")
    first_person_opening: int = Field(default=-30, description="Starts in the first person")
    ellipsis: int = Field(default=-15, description="Contains an ellipsis")
    shouting: int = Field(default=-25, description="Capital-letter ratio above the limit")

    max_digit_ratio: float = Field(default=0.3, description="Above this the span is tabular data")
    max_caps_ratio: float = Field(default=0.3, description="Capital-letter ratio limit")

    mode_offsets: Dict[ExtractionMode, int] = Field(
        default={
            ExtractionMode.MINIMAL: 15,
            ExtractionMode.MODERATE: 0,
            ExtractionMode.AGGRESSIVE: -15,
        },
        description="Threshold shift per extraction mode",
    )

    def threshold_for(self, mode: ExtractionMode) -> int:
        """Effective threshold for an extraction mode."""
        return self.threshold + self.mode_offsets.get(mode, 0)


class ExtensionSettings(BaseModel):
    """Settings snapshot read from the external settings store."""

    enabled: bool = Field(default=True, description="Master switch")
    highlight_aggressiveness: ExtractionMode = Field(
        default=ExtractionMode.MODERATE, description="Extraction mode"
    )
    show_tooltips: bool = Field(default=True, description="Show detail popups on hover")
    enabled_domains: List[str] = Field(default_factory=list, description="Allow list; empty means all")
    disabled_domains: List[str] = Field(default_factory=list, description="Deny list")

    def allows_host(self, host: str) -> bool:
        """Domain allow/deny decision for a page host."""
        if not self.enabled or host in self.disabled_domains:
            return False
        if self.enabled_domains:
            return host in self.enabled_domains
        return True


class TimingConfig(BaseModel):
    """Delays, in seconds, used by the reactive parts of the overlay."""

    mutation_debounce: float = Field(default=0.5, description="Mutation burst batching window")
    scroll_throttle: float = Field(default=0.1, description="Scroll throttle interval")
    resize_debounce: float = Field(default=0.2, description="Resize debounce window")
    tooltip_grace: float = Field(default=0.3, description="Hover-leave grace delay")
    initial_scan_delay: float = Field(default=1.0, description="Wait for dynamic content before first scan")
    retry_base_delay: float = Field(default=0.1, description="Registration-race retry step")
    retry_max_attempts: int = Field(default=5, description="Retries while waiting for registration")
