from pathlib import Path
from typing import Dict, List, Optional

import pytest
from langchain_core.messages import AIMessage
from PIL import Image
from playwright.sync_api import Error as PlaywrightError

from webai_agent.dom.annotate import INDEX_ATTR, INTERACTIVE_SELECTOR, LABEL_ATTR

VISIBLE = {"width": "100px", "height": "20px", "opacity": "1", "display": "block", "visibility": "visible"}
VIEWPORT = {"width": 1200, "height": 1200}


def candidate(index, text="", x=10, y=10, width=100, height=20, styles=None, **extra):
    c = {
        "index": index,
        "tag": extra.pop("tag", "a"),
        "rect": {"x": x, "y": y, "width": width, "height": height},
        "text": text,
        "aria_label": "",
        "title": "",
        "placeholder": "",
        "value": "",
        "styles": styles if styles is not None else [dict(VISIBLE), dict(VISIBLE)],
    }
    c.update(extra)
    return c


class FakeHandle:
    def __init__(self, page: "FakePage", label: str):
        self.page = page
        self.label = label

    def get_attribute(self, name: str) -> Optional[str]:
        return self.label if name == LABEL_ATTR else None

    def click(self):
        self.page.clicked.append(self.label)
        self.page.url = self.page.links.get(self.label, self.page.url)


class FakePage:
    """Just enough of a Playwright page for the agent loop."""

    def __init__(self, pages: Dict[str, List[dict]], links: Optional[Dict[str, str]] = None):
        self.pages = pages
        self.links = links or {}
        self.url = "about:blank"
        self.visited: List[str] = []
        self.clicked: List[str] = []
        self.labels: List[List] = []
        self.tagged = set()
        self.fail_urls = set()
        # Simulates the page re-rendering between the collect and label passes
        self.rerender_after_collect = False

    def goto(self, url, wait_until=None):
        if url in self.fail_urls:
            raise PlaywrightError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        self.url = url
        self.visited.append(url)

    def wait_for_load_state(self, state="load", timeout=None):
        return None

    def evaluate(self, script, arg=None):
        if arg and arg[0] == INTERACTIVE_SELECTOR:
            assert arg[1:] == [LABEL_ATTR, INDEX_ATTR]
            candidates = self.pages.get(self.url, [])
            self.tagged = set() if self.rerender_after_collect else {c["index"] for c in candidates}
            return {"viewport": dict(VIEWPORT), "candidates": candidates}
        if arg and arg[0] == INDEX_ATTR:
            self.labels = [list(pair) for pair in arg[2] if pair[0] in self.tagged]
            self.tagged = set()
            return len(self.labels)
        raise AssertionError(f"unexpected evaluate call: {arg}")

    def screenshot(self, path, full_page=False):
        Image.new("RGB", (40, 40), color="white").save(path)

    def query_selector_all(self, selector):
        assert selector == f"[{LABEL_ATTR}]"
        return [FakeHandle(self, label) for _, label in self.labels]


class FakeLLM:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def invoke(self, messages):
        self.calls.append(list(messages))
        if not self.replies:
            raise AssertionError("FakeLLM ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return AIMessage(content=reply)


@pytest.fixture
def site():
    pages = {
        "https://example.com": [
            candidate(0, "Docs"),
            candidate(1, "Pricing", y=40),
            candidate(2, "Hidden", styles=[dict(VISIBLE, display="none")]),
        ],
        "https://example.com/pricing": [candidate(0, "Pro plan  $10 / month")],
    }
    return FakePage(pages, links={"Pricing": "https://example.com/pricing"})


@pytest.fixture
def png(tmp_path) -> Path:
    path = tmp_path / "shot.png"
    Image.new("RGB", (2000, 1000), color=(200, 10, 10)).save(path)
    return path
