"""Pydantic schemas and helpers for validating classifier output and API payloads."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from models.decision import ExtractedEntities, ExtractedGarment, RequestClassification
from models.outfit_item import OutfitItem
from models.taxonomy import validate_pattern, validate_zone

RequestType = Literal[
    "type_a_complete_outfit",
    "type_b_single_item",
    "type_c_attribute_modification",
    "type_d_style_mood",
    "type_e_layering",
    "type_f_removal",
]


class _Payload(BaseModel):
    """Accepts both snake_case and the camelCase used by the classifier prompt."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OutfitItemPayload(_Payload):
    name: str = Field(min_length=1)
    zone: Optional[str] = None
    category: Optional[str] = None
    colors: List[str] = Field(default_factory=list)
    pattern: Optional[str] = None
    brand: Optional[str] = None
    style_descriptors: List[str] = Field(default_factory=list)
    z_index: Optional[int] = None
    image_url: Optional[str] = None
    product_url: Optional[str] = None

    @field_validator("zone")
    @classmethod
    def _validate_zone(cls, zone: Optional[str]) -> Optional[str]:
        return validate_zone(zone) if zone else None

    @field_validator("pattern")
    @classmethod
    def _validate_pattern(cls, pattern: Optional[str]) -> Optional[str]:
        return validate_pattern(pattern) if pattern else None

    def to_item(self) -> OutfitItem:
        return OutfitItem(
            name=self.name,
            zone=self.zone,
            category=self.category or None,
            colors=tuple(self.colors),
            pattern=self.pattern,
            brand=self.brand or None,
            style_descriptors=tuple(self.style_descriptors),
            z_index=self.z_index,
            image_url=self.image_url,
            product_url=self.product_url,
        )


class GarmentPayload(_Payload):
    name: str = Field(min_length=1)
    category: Optional[str] = None
    brand: Optional[str] = None
    color: Optional[str] = None
    style: List[str] = Field(default_factory=list)
    zone: Optional[str] = None


class EntitiesPayload(_Payload):
    garments: List[GarmentPayload] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    brands: List[str] = Field(default_factory=list)
    style_descriptors: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    attributes: Dict[str, Any] = Field(default_factory=dict)


class ClassificationPayload(_Payload):
    """Structured output expected from the request classifier."""

    type: RequestType
    confidence: float = Field(ge=0.0, le=1.0)
    intent: str = ""
    extracted_entities: EntitiesPayload
    layering_keywords: List[str] = Field(default_factory=list)
    removal_keywords: List[str] = Field(default_factory=list)
    needs_clarification: bool = False
    clarification_reason: Optional[str] = None

    def to_classification(self) -> RequestClassification:
        entities = self.extracted_entities
        return RequestClassification(
            type=self.type,
            confidence=self.confidence,
            intent=self.intent,
            extracted_entities=ExtractedEntities(
                garments=[
                    ExtractedGarment(
                        name=garment.name,
                        category=garment.category or None,
                        brand=garment.brand or None,
                        color=garment.color or None,
                        style=list(garment.style),
                        zone=garment.zone or None,
                    )
                    for garment in entities.garments
                ],
                colors=list(entities.colors),
                brands=list(entities.brands),
                style_descriptors=list(entities.style_descriptors),
                categories=list(entities.categories),
                attributes={key: str(value) for key, value in entities.attributes.items()},
            ),
            layering_keywords=list(self.layering_keywords),
            removal_keywords=list(self.removal_keywords),
            needs_clarification=self.needs_clarification,
            clarification_reason=self.clarification_reason or None,
        )


class TurnPayload(_Payload):
    """Body of ``POST /conversations/{id}/turns``."""

    message: str = Field(min_length=1)
    classification: ClassificationPayload
    new_items: List[OutfitItemPayload] = Field(default_factory=list)
    original_photo_outfit: Optional[List[OutfitItemPayload]] = None
    image_ref: Optional[str] = None
    message_id: Optional[str] = None
    user_id: Optional[str] = None


class CompatibilityPayload(_Payload):
    items: List[OutfitItemPayload]


class ValidationResult(BaseModel):
    """Wrapper returned to callers when validation fails."""

    status: Literal["needs_review"] = "needs_review"
    message: str
    details: List[Dict[str, Any]]


def validation_failure(message: str, exc: ValidationError) -> Dict[str, Any]:
    """Translate Pydantic errors into a consistent review payload."""

    details = exc.errors(include_url=False, include_context=False, include_input=False)
    return ValidationResult(message=message, details=details).model_dump()


def parse_classification(payload: Dict[str, Any]) -> RequestClassification:
    """Validate a raw classifier dict; raises :class:`ValidationError`."""

    return ClassificationPayload.model_validate(payload).to_classification()


__all__ = [
    "ClassificationPayload",
    "CompatibilityPayload",
    "EntitiesPayload",
    "GarmentPayload",
    "OutfitItemPayload",
    "TurnPayload",
    "ValidationResult",
    "parse_classification",
    "validation_failure",
]
