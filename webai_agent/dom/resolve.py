import json
import logging
import re
from typing import List, NamedTuple, Optional, Sequence

from ..core.errors import ElementNotFoundError
from ..utils.timing import sleep, wait_for_load
from .annotate import LABEL_ATTR, sanitize_label

logger = logging.getLogger(__name__)

SETTLE_MS = 300

# {"click": "..."} or {"url": "..."} embedded anywhere in the reply
_COMMAND_RE = re.compile(r'\{\s*"(click|url)"\s*:\s*"((?:[^"\\]|\\.)*)"\s*\}', re.DOTALL)


class Instruction(NamedTuple):
    kind: str  # "click" | "url" | "answer"
    value: str


def parse_instruction(reply: str) -> Instruction:
    """Turn a model reply into a click, a navigation, or a plain answer."""
    text = (reply or "").strip()
    match = _COMMAND_RE.search(text)
    if not match:
        return Instruction("answer", text)
    kind = match.group(1)
    try:
        value = json.loads(match.group(0))[kind]
    except (json.JSONDecodeError, KeyError):
        # Invalid escape such as \q; keep the raw text
        value = match.group(2)
    return Instruction(kind, str(value).strip())


def match_label(labels: Sequence[str], text: str) -> Optional[int]:
    """
    Resolve free text to one label position.
    Exact match first, then case-sensitive containment, then case-insensitive
    containment. Ties go to the earliest label in document order.
    """
    query = sanitize_label(text)
    if not query:
        return None

    for i, label in enumerate(labels):
        if label == query:
            return i
    for i, label in enumerate(labels):
        if label and query in label:
            return i
    query_lc = query.lower()
    for i, label in enumerate(labels):
        if label and query_lc in label.lower():
            return i
    return None


def click_label(page, text: str, timeout_ms: int, settle_ms: int = SETTLE_MS) -> str:
    """Click the labeled element best matching ``text``. Returns the label clicked."""
    handles = page.query_selector_all(f"[{LABEL_ATTR}]")
    labels: List[str] = [h.get_attribute(LABEL_ATTR) or "" for h in handles]

    idx = match_label(labels, text)
    if idx is None:
        logger.warning("No label among %d matches '%s'", len(labels), text)
        raise ElementNotFoundError(text)

    label = labels[idx]
    logger.info("Clicking element %d labeled '%s'", idx, label)
    handles[idx].click()
    wait_for_load(page, timeout_ms)
    sleep(settle_ms)
    return label
