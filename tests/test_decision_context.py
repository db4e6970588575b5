"""Tests for the textual decision context."""

from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

from logic.compatibility_suite import run_compatibility_checks
from logic.decision_context import DecisionContextBuilder, build_decision_context, format_object
from logic.decision_engine import make_decision
from models.decision import ExtractedEntities, ExtractedGarment, RequestClassification
from models.outfit import describe_outfit
from models.outfit_item import OutfitItem

TEE = OutfitItem(name="White T-Shirt", zone="top", category="t-shirt")
JEANS = OutfitItem(name="Blue Jeans", zone="bottom", category="jeans")
BLACK_JEANS = OutfitItem(name="Black Jeans", zone="bottom", category="jeans")


def _classification() -> RequestClassification:
    return RequestClassification(
        type="type_b_single_item",
        confidence=0.9,
        intent="User wants black jeans",
        extracted_entities=ExtractedEntities(garments=[ExtractedGarment(name="black jeans")], colors=["black"]),
    )


def test_format_object_renders_scalars_and_skips_empty_values() -> None:
    rendered = format_object({"flag": True, "count": 1.0, "ratio": 0.5, "empty": [], "none": None, "data": {"x": 1}})
    assert rendered == '- flag: true\n- count: 1\n- ratio: 0.5\n- data: {"x":1}'


def test_replacement_lists_removed_items_verbatim() -> None:
    decision = make_decision(_classification(), [TEE, JEANS], [BLACK_JEANS])
    builder = DecisionContextBuilder()
    builder.add_decision(decision)
    rendered = str(builder)

    assert rendered.startswith("Decision Result:\n- action: execute")
    assert '- itemsToRemove: ["Blue Jeans"]' in rendered
    assert "- replacementOperation: true" in rendered
    assert "REMOVE these items completely: Blue Jeans." in rendered
    assert rendered.endswith('\nitemsToRemove: ["Blue Jeans"]')


def test_additions_have_no_replacement_keys() -> None:
    decision = make_decision(_classification(), [], [TEE, JEANS])
    builder = DecisionContextBuilder()
    builder.add_decision(decision)
    rendered = builder.build()

    assert "- itemsToAdd: White T-Shirt, Blue Jeans" in rendered
    assert "itemsToRemove" not in rendered
    assert "replacementOperation" not in rendered


def test_sections_keep_fixed_order() -> None:
    items = [TEE, BLACK_JEANS]
    decision = make_decision(_classification(), [TEE, JEANS], [BLACK_JEANS])
    context = build_decision_context(
        _classification(),
        "black jeans instead",
        describe_outfit([TEE, JEANS]),
        decision,
        run_compatibility_checks(items),
    )

    titles = [
        "Request Classification:",
        "Current Outfit State:",
        "Decision Result:",
        "Compatibility Checks:",
    ]
    positions = [context.index(title) for title in titles]
    assert positions == sorted(positions)
    assert "- userMessage: black jeans instead" in context
    assert "- items: White T-Shirt (t-shirt), Blue Jeans (jeans)" in context
    assert "- color: passed" in context
    assert "Clarification Requested" not in context


def test_clarification_section_comes_last() -> None:
    classification = RequestClassification(type="type_f_removal", confidence=0.8, removal_keywords=["remove"])
    decision = make_decision(classification, [TEE, JEANS], [])
    context = build_decision_context(classification, "remove something", describe_outfit([TEE, JEANS]), decision)

    assert context.endswith(
        "Clarification Requested:\nWhich item would you like to remove?\nOptions: White T-Shirt, Blue Jeans"
    )


def test_empty_builder_renders_empty_string() -> None:
    assert str(DecisionContextBuilder()) == ""
