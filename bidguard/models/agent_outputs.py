"""
Structured outputs of the LLM agents.

These models double as the JSON contract handed to the LLM (via
`format_instructions`) and as the shape persisted on proposal records.
"""
import json
from typing import List, Optional, Type

from pydantic import BaseModel, Field, field_validator

from bidguard.domain.constants import Recommendation, TrafficLight, CritiqueStatus


def format_instructions(model: Type[BaseModel]) -> str:
    """JSON output instructions derived from a model's schema."""
    schema = json.dumps(model.model_json_schema(), indent=2)
    return (
        "Respond ONLY with a single JSON object that conforms to the JSON schema below. "
        "Do not include commentary before or after the JSON.\n"
        f"```json\n{schema}\n```"
    )


def _as_string_list(value):
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


class ResearchOutput(BaseModel):
    client_news: List[str] = Field(default_factory=list, description="Recent news about the client found online")
    competitor_wins: List[str] = Field(default_factory=list, description="Recent contract awards to competitors")
    pain_points: List[str] = Field(default_factory=list, description="Current sector pain points relevant to the bid")
    evidence_bullets: List[str] = Field(default_factory=list, description="Key stats or facts to include in the proposal")

    @field_validator("client_news", "competitor_wins", "pain_points", "evidence_bullets", mode="before")
    @classmethod
    def coerce_lists(cls, value):
        return _as_string_list(value)

    def summary(self, idea_injection: Optional[str] = None) -> str:
        """Render the research as the context block consumed by later prompts."""
        sections = [
            ("Client News", self.client_news),
            ("Competitor Wins", self.competitor_wins),
            ("Sector Pain Points", self.pain_points),
            ("Evidence", self.evidence_bullets),
        ]
        lines = []
        for title, items in sections:
            if items:
                lines.append(f"{title}:")
                lines.extend(f"- {item}" for item in items)
        if idea_injection:
            lines.append("Bidder's Own Ideas (must be reflected in the bid):")
            lines.append(idea_injection.strip())
        return "\n".join(lines) or "No research available."


class QualificationResult(BaseModel):
    recommendation: Recommendation = Recommendation.CAUTION
    confidence_score: int = Field(50, ge=0, le=100)
    traffic_light: TrafficLight = TrafficLight.AMBER
    reasoning: List[str] = Field(default_factory=list)
    strategic_advice: str = ""

    @field_validator("reasoning", mode="before")
    @classmethod
    def coerce_reasoning(cls, value):
        return _as_string_list(value)

    @field_validator("recommendation", mode="before")
    @classmethod
    def normalise_recommendation(cls, value):
        if isinstance(value, Recommendation):
            return value
        text = str(value or "").upper()
        if "NO-GO" in text or "NO GO" in text:
            return Recommendation.NO_GO
        if "CAUTION" in text:
            return Recommendation.CAUTION
        if "GO" in text:
            return Recommendation.GO
        return Recommendation.CAUTION

    @field_validator("traffic_light", mode="before")
    @classmethod
    def normalise_traffic_light(cls, value):
        if isinstance(value, TrafficLight):
            return value
        # Agents are chatty: "RED...AMBER" style answers are reduced to one light
        text = str(value or "").upper()
        if "RED" in text:
            return TrafficLight.RED
        if "GREEN" in text:
            return TrafficLight.GREEN
        return TrafficLight.AMBER

    @field_validator("confidence_score", mode="before")
    @classmethod
    def clamp_confidence(cls, value):
        try:
            return max(0, min(100, int(round(float(value)))))
        except (TypeError, ValueError):
            return 50


class StrategyDraft(BaseModel):
    strategy_name: str
    executive_summary: str = Field(..., description="The core pitch")
    key_theme: str = Field("", description="The unifying theme of the bid")
    strengths: List[str] = Field(default_factory=list, description="Why this wins")
    weaknesses: List[str] = Field(default_factory=list, description="Potential risks of this approach")

    @field_validator("strengths", "weaknesses", mode="before")
    @classmethod
    def coerce_lists(cls, value):
        return _as_string_list(value)


class ComplianceItem(BaseModel):
    item: str
    status: bool


class Annotation(BaseModel):
    text: str = Field(..., description="Exact quote from the proposal that needs fixing")
    issue: str = Field("", description="Short issue label")
    suggestion: str = Field("", description="Rewritten version with specific evidence")


class CritiqueOutput(BaseModel):
    score: float = Field(..., ge=0, le=10, description="Bid Readiness Score (0-10). Start at 10, then DEDUCT.")
    status: CritiqueStatus = Field(CritiqueStatus.REJECT, description="REJECT if score < 8.5")
    compliance_checklist: List[ComplianceItem] = Field(
        default_factory=list,
        description="Compliance items: Social Value, Carbon Reduction, Modern Slavery, ISO Standards",
    )
    harsh_feedback: List[str] = Field(default_factory=list, description="Brutal, specific criticisms")
    evidence_score: float = Field(0, ge=0, le=10, description="How many claims have specific numbers/dates")
    social_value_present: bool = False
    word_count: int = 0
    annotations: List[Annotation] = Field(default_factory=list)

    @field_validator("harsh_feedback", mode="before")
    @classmethod
    def coerce_feedback(cls, value):
        return _as_string_list(value)

    @field_validator("status", mode="before")
    @classmethod
    def normalise_status(cls, value):
        if isinstance(value, CritiqueStatus):
            return value
        return CritiqueStatus.ACCEPT if "ACCEPT" in str(value or "").upper() else CritiqueStatus.REJECT

    @field_validator("score", "evidence_score", mode="before")
    @classmethod
    def clamp_score(cls, value):
        try:
            return max(0.0, min(10.0, float(value)))
        except (TypeError, ValueError):
            return 0.0


class HumanizerOutput(BaseModel):
    refined_text: str = Field(..., description="The humanized, British English version")
    changes_made: List[str] = Field(default_factory=list, description="Summary of changes (e.g. removed 'delve')")

    @field_validator("changes_made", mode="before")
    @classmethod
    def coerce_changes(cls, value):
        return _as_string_list(value)
