"""Terminal demo for the portfolio assistant."""

import argparse
import asyncio
import logging
import sys
from typing import Dict, Set

from portfolio_assistant import AsyncioScheduler, ConversationController
from portfolio_assistant.config import DEFAULT_CONFIG_PATH, load_config
from portfolio_assistant.types import RevealState, Role


async def chat(controller: ConversationController) -> None:
    loop = asyncio.get_running_loop()
    printed: Dict[str, int] = {}
    finished: Set[str] = set()

    def render(c: ConversationController) -> None:
        # Transcript order: a message is only printed once everything before it is done.
        for msg in c.messages:
            if msg.id in finished:
                continue
            if msg.role is Role.USER:
                finished.add(msg.id)
                continue
            if msg.reveal_state is RevealState.PENDING:
                break
            if msg.id not in printed:
                sys.stdout.write("bot> ")
            sys.stdout.write(msg.visible_text[printed.get(msg.id, 0):])
            printed[msg.id] = len(msg.visible_text)
            if msg.reveal_state is not RevealState.COMPLETE:
                break
            sys.stdout.write("\n")
            finished.add(msg.id)
        sys.stdout.flush()

    controller.subscribe(render)
    print("Portfolio assistant ready. Type 'exit' to quit.")
    print("Try: " + " | ".join(controller.suggestion_feed()))
    while True:
        user_input = (await loop.run_in_executor(None, input, "you> ")).strip()
        if not user_input or user_input.lower() in {"exit", "quit"}:
            break
        result = controller.submit(user_input)
        while result is not None and result.reply.reveal_state is not RevealState.COMPLETE:
            await asyncio.sleep(0.05)
        print("suggestions: " + " | ".join(controller.suggestion_feed()))


def main() -> None:
    parser = argparse.ArgumentParser(description="Chat with the portfolio assistant in a terminal.")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to config file.")
    parser.add_argument("--data", default=None, help="Path to the FAQ JSON document.")
    parser.add_argument("--instant", action="store_true", help="Show answers without the typing effect.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    config = load_config(args.config, missing_ok=True)
    if args.instant:
        config.setdefault("reveal", {})["instant"] = True
    data_path = args.data or config.get("knowledge_base", {}).get("source", "data/faq.json")

    async def run() -> None:
        controller = ConversationController(config, scheduler=AsyncioScheduler())
        if not controller.load_path(data_path):
            print(f"No FAQ entries loaded from {data_path}; every answer will be the fallback.")
        try:
            await chat(controller)
        finally:
            controller.dispose()

    asyncio.run(run())


if __name__ == "__main__":
    main()
