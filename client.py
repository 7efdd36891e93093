#!/usr/bin/env python3
"""
Terminal client for the assistant websocket (/ws).

Prints every assistant message once its reveal completes, then the
suggestion chips for the turn. Type a number to pick a chip.

Examples:
  python client.py --url ws://127.0.0.1:9000/ws --query "What tools do you use?"
  python client.py --url ws://127.0.0.1:9000/ws               # interactive
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Dict, List, Optional, Set

import websockets


def _build_headers(args: argparse.Namespace) -> List[tuple[str, str]]:
    headers: List[tuple[str, str]] = []
    if args.auth:
        headers.append(("Authorization", args.auth))
    return headers


def _print_completed(feed: Dict, seen: Set[str]) -> None:
    for msg in feed.get("messages", []):
        if msg.get("role") != "assistant" or msg.get("id") in seen:
            continue
        if msg.get("revealState") != "complete":
            break
        seen.add(msg["id"])
        print(f"bot> {msg.get('text', '')}")


async def _wait_turn(ws, seen: Set[str]) -> List[str]:
    """Read feed frames until the newest assistant reply has fully revealed."""
    while True:
        raw = await ws.recv()
        try:
            feed = json.loads(raw)
        except ValueError:
            print(raw)
            continue
        if feed.get("type") != "feed":
            print("!!", feed.get("error", raw), file=sys.stderr)
            return []
        _print_completed(feed, seen)
        replies = [m for m in feed.get("messages", []) if m.get("role") == "assistant"]
        if replies and all(m.get("revealState") == "complete" for m in replies):
            return feed.get("suggestions", [])


async def text_client(uri: str, query: Optional[str], headers: List[tuple[str, str]]) -> None:
    seen: Set[str] = set()
    async with websockets.connect(uri, additional_headers=headers) as ws:
        first = json.loads(await ws.recv())
        suggestions: List[str] = first.get("suggestions", [])
        if query is not None:
            await ws.send(json.dumps({"type": "text", "text": query}))
            await _wait_turn(ws, seen)
            return
        print("Connected. Type 'exit' to quit.")
        while True:
            for idx, label in enumerate(suggestions, start=1):
                print(f"  [{idx}] {label}")
            try:
                text = input("you> ").strip()
            except (EOFError, KeyboardInterrupt):
                break
            if not text or text.lower() in {"exit", "quit"}:
                break
            if text.isdigit() and 1 <= int(text) <= len(suggestions):
                await ws.send(json.dumps({"type": "suggestion", "label": suggestions[int(text) - 1]}))
            else:
                await ws.send(json.dumps({"type": "text", "text": text}))
            suggestions = await _wait_turn(ws, seen) or suggestions


def main() -> None:
    parser = argparse.ArgumentParser(description="Client for the portfolio assistant websocket")
    parser.add_argument("--url", required=True, help="URL, e.g. ws://host:9000/ws")
    parser.add_argument("--query", default=None, help="One-shot question. Omit to enter interactive mode.")
    parser.add_argument("--auth", default=None, help="Authorization header if needed, e.g. 'Bearer xxx'")
    args = parser.parse_args()

    if not args.url.endswith("/ws"):
        print("Unknown endpoint. Use ws(s)://.../ws", file=sys.stderr)
        sys.exit(2)
    asyncio.run(text_client(args.url, args.query, _build_headers(args)))


if __name__ == "__main__":
    main()
