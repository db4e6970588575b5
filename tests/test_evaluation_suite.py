from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

from evaluation.harness import run_evaluation_suite, run_scenario, run_smoke_checks
from evaluation.scenarios import BLUE_JEANS, SCENARIOS, WHITE_TEE, EvaluationScenario, _turn


def test_evaluation_scenarios_pass():
    results = run_evaluation_suite()
    assert len(results) == len(SCENARIOS)
    for result in results:
        assert result["passed"], f"Scenario {result['scenario']} failed checks: {result['checks']}"
        assert result["checks"], f"Scenario {result['scenario']} checked nothing"


def test_unmet_expectations_fail_the_scenario():
    scenario = EvaluationScenario(
        name="wrong_state",
        description="Separates are never a one-piece.",
        turns=[_turn("a white t-shirt and blue jeans", "type_a_complete_outfit", WHITE_TEE, BLUE_JEANS)],
        expectations={"final_state": "one_piece", "final_items": 2},
    )
    result = run_scenario(scenario)
    assert not result["passed"]
    assert result["checks"] == {"final_state": False, "final_items": True}


def test_smoke_checks_report_each_scenario():
    lines = run_smoke_checks()
    assert lines == [f"{scenario.name}: passed" for scenario in SCENARIOS]
