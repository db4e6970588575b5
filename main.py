"""Simple entrypoint to run the outfit stylist locally."""

from agents.stylist_agent import TurnRequest
from evaluation.harness import run_smoke_checks
from evaluation.scenarios import BLUE_JEANS, DENIM_JACKET, WHITE_TEE, scripted_classification
from stylist_app.app import StylistApp


def main() -> None:
    app = StylistApp()
    turns = [
        ("a white t-shirt and blue jeans", "type_a_complete_outfit", [WHITE_TEE, BLUE_JEANS], []),
        ("layer a denim jacket over everything", "type_e_layering", [DENIM_JACKET], ["layer", "over"]),
    ]
    for message, request_type, items, layering in turns:
        result = app.process_turn(
            TurnRequest(
                conversation_id="demo",
                message=message,
                classification=scripted_classification(request_type, items, layering_keywords=layering),
                new_items=items,
            )
        )
        print(f"> {message}\n{result.response_text}\n")
    print(app.undo("demo").message)
    for line in run_smoke_checks():
        print(line)


if __name__ == "__main__":
    main()
