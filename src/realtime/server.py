from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from portfolio_assistant import AsyncioScheduler, ConversationController
from portfolio_assistant.config import DEFAULT_CONFIG_PATH, load_config
from portfolio_assistant.loader import KnowledgeBase, load_faq_document
from portfolio_assistant.suggestions import starter_suggestions

logger = logging.getLogger(__name__)


class AskRequest(BaseModel):
    text: str


def _read_document(path: str) -> Optional[List[Any]]:
    # A broken document still serves: every controller falls back to the honest reply.
    try:
        return load_faq_document(path)
    except (OSError, ValueError, RecursionError) as exc:
        logger.warning("FAQ document unavailable (%s); serving fallback answers only", exc)
        return None


def _feed_payload(controller: ConversationController) -> str:
    return json.dumps(
        {
            "type": "feed",
            "messages": controller.message_feed(),
            "suggestions": controller.suggestion_feed(),
        },
        ensure_ascii=False,
    )


async def _stop_sender(task: "asyncio.Task[None]") -> None:
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError, WebSocketDisconnect):
        await task


def _parse_frame(raw: str) -> Dict[str, Any]:
    try:
        payload = json.loads(raw) if raw else {}
    except ValueError:
        return {"type": "text", "text": raw}
    if not isinstance(payload, dict):
        return {"type": "text", "text": raw}
    return payload


def create_app(config_path: str = DEFAULT_CONFIG_PATH, data_path: Optional[str] = None) -> FastAPI:
    app = FastAPI()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    cfg = load_config(config_path, missing_ok=True)
    src_path = data_path or cfg.get("knowledge_base", {}).get("source", "data/faq.json")
    document = _read_document(src_path)
    entry_count = len(KnowledgeBase().load(document))

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"status": "ok", "entries": entry_count}

    @app.get("/suggestions")
    async def suggestions() -> Dict[str, Any]:
        return {"suggestions": [s.label for s in starter_suggestions()]}

    @app.post("/ask")
    async def ask(request: AskRequest) -> Dict[str, Any]:
        """One-shot turn: the answer comes back fully revealed."""
        controller = ConversationController(cfg)
        controller.load(document)
        try:
            result = controller.submit(request.text, instant=True)
            return {
                "messages": controller.message_feed(),
                "suggestions": controller.suggestion_feed(),
                "matched": bool(result and result.matched),
            }
        finally:
            controller.dispose()

    @app.websocket("/ws")
    async def ws_chat(websocket: WebSocket) -> None:
        """Conversation endpoint.

        Inbound text frames are questions, or JSON control frames:
          {"type": "text", "text": ...}
          {"type": "suggestion", "label": ...}
          {"type": "fast_forward", "id": ...}
        Outbound frames are JSON feed snapshots, one per transcript change.
        """
        await websocket.accept()
        outbox: "asyncio.Queue[str]" = asyncio.Queue()
        controller = ConversationController(cfg, scheduler=AsyncioScheduler(asyncio.get_running_loop()))
        controller.load(document)
        controller.subscribe(lambda c: outbox.put_nowait(_feed_payload(c)))

        async def pump() -> None:
            while True:
                await websocket.send_text(await outbox.get())

        sender = asyncio.create_task(pump())
        await outbox.put(_feed_payload(controller))
        try:
            while True:
                payload = _parse_frame(await websocket.receive_text())
                kind = payload.get("type")
                if kind == "text":
                    controller.submit(str(payload.get("text") or ""))
                elif kind == "suggestion":
                    controller.select_suggestion(str(payload.get("label") or ""))
                elif kind == "fast_forward":
                    controller.fast_forward(str(payload.get("id") or ""))
                else:
                    await outbox.put(json.dumps({"type": "error", "error": f"unknown frame type: {kind}"}))
        except WebSocketDisconnect:
            return
        finally:
            controller.dispose()
            await _stop_sender(sender)

    return app


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    server_cfg = load_config(DEFAULT_CONFIG_PATH, missing_ok=True).get("server", {})
    uvicorn.run(create_app(), host=server_cfg.get("host", "0.0.0.0"), port=server_cfg.get("port", 9000))
