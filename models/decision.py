"""Request classification and decision result schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional

from models.clarification import ClarificationContext, ClarificationOption
from models.compatibility import Suggestion
from models.outfit_item import OutfitItem

REQUEST_TYPES = (
    "type_a_complete_outfit",
    "type_b_single_item",
    "type_c_attribute_modification",
    "type_d_style_mood",
    "type_e_layering",
    "type_f_removal",
)

DecisionAction = Literal["execute", "clarify", "suggest"]


@dataclass
class ExtractedGarment:
    name: str
    category: Optional[str] = None
    brand: Optional[str] = None
    color: Optional[str] = None
    style: List[str] = field(default_factory=list)
    zone: Optional[str] = None


@dataclass
class ExtractedEntities:
    garments: List[ExtractedGarment] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)
    brands: List[str] = field(default_factory=list)
    style_descriptors: List[str] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass
class RequestClassification:
    """Structured output of the external request classifier."""

    type: str
    confidence: float
    intent: str = ""
    extracted_entities: ExtractedEntities = field(default_factory=ExtractedEntities)
    layering_keywords: List[str] = field(default_factory=list)
    removal_keywords: List[str] = field(default_factory=list)
    needs_clarification: bool = False
    clarification_reason: Optional[str] = None


@dataclass
class ClarificationQuestion:
    question: str
    options: List[ClarificationOption]
    context: ClarificationContext


@dataclass
class DecisionResult:
    action: DecisionAction
    reasoning: str
    items_to_add: List[OutfitItem] = field(default_factory=list)
    items_to_remove: List[OutfitItem] = field(default_factory=list)
    should_regenerate_from_scratch: bool = False
    suggestions: List[Suggestion] = field(default_factory=list)
    clarification_question: Optional[ClarificationQuestion] = None


__all__ = [
    "REQUEST_TYPES",
    "ClarificationQuestion",
    "DecisionResult",
    "ExtractedEntities",
    "ExtractedGarment",
    "RequestClassification",
]
