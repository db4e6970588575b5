"""FastAPI server exposing the stylist conversation endpoints for deployment."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

from fastapi import Body, FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from agents.stylist_agent import HistoryResult, TurnRequest, TurnResult
from logic.compatibility_suite import all_passed, run_compatibility_checks
from logic.validation import CompatibilityPayload, TurnPayload, validation_failure
from models.compatibility import CompatibilityCheck
from stylist_app.app import StylistApp
from tools.observability import instrument_operation


def serialize_check(check: CompatibilityCheck) -> Dict[str, Any]:
    return {"check_type": check.check_type, **asdict(check)}


def serialize_turn(result: TurnResult) -> Dict[str, Any]:
    return jsonable_encoder(
        {
            "status": "ok",
            "decision": asdict(result.decision),
            "outfit_state": result.outfit_state.type,
            "is_complete": result.outfit_state.is_complete,
            "missing_zones": result.outfit_state.missing_zones,
            "items": [item.to_dict() for item in result.final_items],
            "compatibility_checks": [serialize_check(check) for check in result.compatibility_checks],
            "response_text": result.response_text,
            "needs_clarification": result.needs_clarification,
            "clarification": result.clarification.to_dict() if result.clarification else None,
            "decision_context": result.decision_context,
        }
    )


def serialize_history(result: HistoryResult) -> Dict[str, Any]:
    return {
        "status": "ok" if result.success else "unchanged",
        "success": result.success,
        "message": result.message,
        "items": [item.to_dict() for item in result.items],
    }


def _compatibility_review(exc: ValidationError) -> Dict[str, Any]:
    return validation_failure("Invalid compatibility payload", exc)


def _compatibility_summary(result: Dict[str, Any]) -> Dict[str, Any]:
    failed = [check["check_type"] for check in result["checks"] if not check["passed"]]
    return {"passed": result["passed"], "failed_checks": failed}


@instrument_operation(
    "compatibility",
    input_model=CompatibilityPayload,
    on_validation_error=_compatibility_review,
    summarize=_compatibility_summary,
)
def evaluate_compatibility(*, payload: CompatibilityPayload) -> Dict[str, Any]:
    """Run every checker on a list of items."""

    checks = run_compatibility_checks([item.to_item() for item in payload.items])
    return jsonable_encoder(
        {
            "status": "ok",
            "passed": all_passed(checks),
            "checks": [serialize_check(check) for check in checks],
        }
    )


def create_app(stylist: StylistApp | None = None) -> FastAPI:
    """Build the FastAPI app around a :class:`StylistApp` container."""

    stylist = stylist or StylistApp()
    api = FastAPI(title="Outfit Stylist", version="0.1.0")
    api.state.stylist = stylist

    @api.get("/healthz")
    async def healthcheck() -> dict:
        """Lightweight readiness probe."""

        return {
            "status": "ok",
            "service": "outfit-stylist",
            "environment": stylist.config.environment or "local",
            "model": stylist.config.model,
        }

    @api.post("/conversations/{conversation_id}/turns")
    def post_turn(conversation_id: str, body: Dict[str, Any] = Body(...)):
        """Apply one user turn to the conversation's outfit."""

        try:
            payload = TurnPayload.model_validate(body)
        except ValidationError as exc:
            return JSONResponse(status_code=422, content=validation_failure("Invalid turn payload", exc))

        result = stylist.process_turn(
            TurnRequest(
                conversation_id=conversation_id,
                message=payload.message,
                classification=payload.classification.to_classification(),
                new_items=[item.to_item() for item in payload.new_items],
                original_photo_outfit=(
                    [item.to_item() for item in payload.original_photo_outfit]
                    if payload.original_photo_outfit is not None
                    else None
                ),
                image_ref=payload.image_ref,
                message_id=payload.message_id,
                user_id=payload.user_id,
            )
        )
        return serialize_turn(result)

    @api.post("/conversations/{conversation_id}/undo")
    def undo(conversation_id: str) -> dict:
        return serialize_history(stylist.undo(conversation_id))

    @api.post("/conversations/{conversation_id}/redo")
    def redo(conversation_id: str) -> dict:
        return serialize_history(stylist.redo(conversation_id))

    @api.get("/conversations/{conversation_id}")
    def get_conversation(conversation_id: str) -> dict:
        exported = stylist.export_conversation(conversation_id)
        if exported is None:
            raise HTTPException(status_code=404, detail="conversation not found")
        return exported

    @api.delete("/conversations/{conversation_id}")
    def delete_conversation(conversation_id: str) -> dict:
        if not stylist.end_conversation(conversation_id):
            raise HTTPException(status_code=404, detail="conversation not found")
        return {"status": "deleted", "conversation_id": conversation_id}

    @api.post("/compatibility")
    def compatibility(body: Dict[str, Any] = Body(...)):
        """Run the color, formality, pattern and seasonal checks on ``items``."""

        result = evaluate_compatibility(**body)
        if result.get("status") == "needs_review":
            return JSONResponse(status_code=422, content=result)
        return result

    return api


app = create_app()


def get_app() -> FastAPI:
    """Expose the FastAPI instance for ASGI servers."""

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:app", host="0.0.0.0", port=int("8080"), reload=False)
