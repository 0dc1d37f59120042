"""Score breakdown: GRAAF (50) + CRAFT (30) + Technical (20) = 100."""

from pydantic import BaseModel, ConfigDict, Field


CRITERION_MAXIMA = {
    "graaf": {
        "credibility": 10,
        "relevance": 10,
        "actionability": 10,
        "accuracy": 10,
        "freshness": 10,
    },
    "craft": {
        "content_density": 7,
        "on_page_optimization": 8,
        "visual_richness": 6,
        "faq_integration": 5,
        "trust_signals": 4,
    },
    "technical": {
        "meta_optimization": 4,
        "structured_data": 4,
        "internal_linking": 4,
        "heading_hierarchy": 4,
        "mobile_readability": 4,
    },
}

GROUP_MAXIMA = {group: sum(criteria.values()) for group, criteria in CRITERION_MAXIMA.items()}

# (minimum total, label), highest first
QUALITY_BANDS = (
    (90, "excellent"),
    (80, "good"),
    (70, "fair"),
    (60, "average"),
    (0, "needs-improvement"),
)


def quality_label(total: int) -> str:
    for floor, label in QUALITY_BANDS:
        if total >= floor:
            return label
    return QUALITY_BANDS[-1][1]


class GraafScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = Field(0, ge=0, le=50)
    credibility: int = Field(0, ge=0, le=10)
    relevance: int = Field(0, ge=0, le=10)
    actionability: int = Field(0, ge=0, le=10)
    accuracy: int = Field(0, ge=0, le=10)
    freshness: int = Field(0, ge=0, le=10)


class CraftScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = Field(0, ge=0, le=30)
    content_density: int = Field(0, ge=0, le=7)
    on_page_optimization: int = Field(0, ge=0, le=8)
    visual_richness: int = Field(0, ge=0, le=6)
    faq_integration: int = Field(0, ge=0, le=5)
    trust_signals: int = Field(0, ge=0, le=4)


class TechnicalScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = Field(0, ge=0, le=20)
    meta_optimization: int = Field(0, ge=0, le=4)
    structured_data: int = Field(0, ge=0, le=4)
    internal_linking: int = Field(0, ge=0, le=4)
    heading_hierarchy: int = Field(0, ge=0, le=4)
    mobile_readability: int = Field(0, ge=0, le=4)


class ScoreBreakdown(BaseModel):
    """Terminal score object for one scan."""

    model_config = ConfigDict(frozen=True)

    total: int = Field(0, ge=0, le=100)
    quality: str = "needs-improvement"
    graaf: GraafScore = Field(default_factory=GraafScore)
    craft: CraftScore = Field(default_factory=CraftScore)
    technical: TechnicalScore = Field(default_factory=TechnicalScore)
