"""Validated counts produced by the LLM validator (or its fallback)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .parser_output import ParserCounts


VALIDATED_CATEGORIES = (
    "expert_quotes",
    "statistics",
    "sources",
    "case_studies",
    "faq",
)


class Rejection(BaseModel):
    """One detected item the validator refused, by 0-based snippet index."""

    index: int = Field(..., ge=0)
    reason: str = ""


class CategoryVerdict(BaseModel):
    """Validator verdict for a single category."""

    validated: int = Field(..., ge=0)
    rejected: list[Rejection] = Field(default_factory=list)


class ValidationResponse(BaseModel):
    """Strict JSON shape expected back from the validator."""

    expert_quotes: CategoryVerdict
    statistics: CategoryVerdict
    sources: CategoryVerdict
    case_studies: CategoryVerdict
    faq: CategoryVerdict


class ValidatedCounts(BaseModel):
    """
    Narrowing of parser counts to the externally verified categories.
    Each count is <= the detected count; fallback=True means nothing was verified.
    """

    model_config = ConfigDict(frozen=True)

    expert_quotes: int = Field(0, ge=0)
    statistics: int = Field(0, ge=0)
    sources: int = Field(0, ge=0)
    case_studies: int = Field(0, ge=0)
    faq: int = Field(0, ge=0)
    rejections: dict[str, list[Rejection]] = Field(
        default_factory=lambda: {cat: [] for cat in VALIDATED_CATEGORIES}
    )
    fallback: bool = False
    fallback_reason: Optional[str] = None

    @field_validator(*VALIDATED_CATEGORIES, mode="before")
    @classmethod
    def _none_is_zero(cls, value):
        return 0 if value is None else value

    @field_validator("rejections")
    @classmethod
    def _every_category_present(cls, value: dict[str, list[Rejection]]) -> dict[str, list[Rejection]]:
        return {cat: list(value.get(cat, [])) for cat in VALIDATED_CATEGORIES}

    @classmethod
    def from_parser_counts(cls, counts: ParserCounts, reason: str) -> "ValidatedCounts":
        """Fallback: every detected item is treated as validated."""
        return cls(
            **{cat: counts.detected(cat) for cat in VALIDATED_CATEGORIES},
            fallback=True,
            fallback_reason=reason,
        )

    @classmethod
    def from_response(cls, response: ValidationResponse) -> "ValidatedCounts":
        verdicts = {cat: getattr(response, cat) for cat in VALIDATED_CATEGORIES}
        return cls(
            **{cat: v.validated for cat, v in verdicts.items()},
            rejections={cat: list(v.rejected) for cat, v in verdicts.items()},
            fallback=False,
        )
