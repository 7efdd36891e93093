"""
Shared pytest fixtures for the portfolio assistant tests.

Provides:
- A small FAQ document in the raw category/qa shape
- A virtual scheduler so reveals run without wall-clock delays
- A controller wired to both, with a seeded random source
"""

import json
import random
from pathlib import Path

import pytest

from portfolio_assistant import ConversationController, VirtualScheduler


@pytest.fixture
def tools_document():
    return [
        {
            "title": "Tools",
            "keywords": ["tools"],
            "qa": [{"q": "What tools do you use?", "a": "Figma and Notion.", "keywords": ["tools"]}],
        }
    ]


@pytest.fixture
def faq_document():
    return [
        {
            "title": "Projects",
            "keywords": ["Case Study", "portfolio"],
            "qa": [
                {
                    "q": "Show me your best mobile project",
                    "a": "The Mobile Checkout Redesign cut checkout steps from five to three.",
                    "source": "Case study: Mobile Checkout",
                    "keywords": ["mobile", "checkout", "Portfolio"],
                },
                {
                    "q": "Show me your dashboard work",
                    "a": "A configurable analytics overview with drill-down tables.",
                    "keywords": ["dashboard"],
                },
            ],
        },
        {
            "title": "Tools",
            "keywords": ["tools"],
            "qa": [{"q": "What tools do you use?", "a": "Figma and Notion.", "keywords": ["figma"]}],
        },
        {
            "title": "Quick",
            "keywords": [],
            "qa": [{"q": "Are you available?", "a": "Yes.", "keywords": ["available"]}],
        },
    ]


@pytest.fixture
def faq_path(tmp_path: Path, faq_document) -> Path:
    path = tmp_path / "faq.json"
    path.write_text(json.dumps(faq_document), encoding="utf-8")
    return path


@pytest.fixture
def scheduler() -> VirtualScheduler:
    return VirtualScheduler()


@pytest.fixture
def controller(scheduler, faq_document):
    ctrl = ConversationController({}, scheduler=scheduler, rng=random.Random(7))
    ctrl.load(faq_document)
    yield ctrl
    ctrl.dispose()
