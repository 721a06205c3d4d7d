"""FastAPI server exposing the stylist turn endpoints for deployment."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import JSONResponse

from stylist_app.app import OutfitStylistApp
from stylist_app.errors import SessionNotFoundError


def _as_response(payload: Dict[str, Any]) -> JSONResponse:
    status_code = 422 if payload.get("status") == "needs_review" else 200
    return JSONResponse(status_code=status_code, content=payload)


def create_app(stylist_app: OutfitStylistApp | None = None) -> FastAPI:
    """Build the ASGI app around one stylist instance."""

    stylist = stylist_app or OutfitStylistApp()
    api = FastAPI(title="Outfit Stylist", version="0.1.0")
    api.state.stylist = stylist

    @api.get("/healthz")
    async def healthcheck() -> dict:
        """Lightweight readiness check."""

        return {
            "status": "ok",
            "service": "outfit-stylist",
            "environment": stylist.config.environment or "local",
            "model": stylist.config.model,
            "backend_configured": bool(stylist.config.api_key),
        }

    @api.post("/conversations/{conversation_id}/turns")
    def post_turn(conversation_id: str, payload: Dict[str, Any] = Body(...)) -> JSONResponse:
        """Run one styling turn for the conversation."""

        return _as_response(stylist.handle_turn(conversation_id, payload))

    @api.post("/conversations/{conversation_id}/undo")
    def post_undo(conversation_id: str) -> JSONResponse:
        return _as_response(stylist.undo(conversation_id))

    @api.post("/conversations/{conversation_id}/redo")
    def post_redo(conversation_id: str) -> JSONResponse:
        return _as_response(stylist.redo(conversation_id))

    @api.get("/conversations/{conversation_id}")
    def get_conversation(conversation_id: str) -> dict:
        """Return the exported session: history, pointer and pending question."""

        try:
            return stylist.export_session(conversation_id)
        except SessionNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    return api


app = create_app()


def get_app() -> FastAPI:
    """Expose the FastAPI instance for ASGI servers."""

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:app", host="0.0.0.0", port=8080, reload=False)
