"""
Interactive element annotation.

Every element matching ``INTERACTIVE_SELECTOR`` gets a red outline so it shows
up in the screenshot. The visible ones additionally carry their sanitized text
in the ``gpt-link-text`` attribute, which is what the model refers to when it
asks for a click.

Collection and labeling are split: the page reports raw facts (rects, text,
computed styles of the element and its ancestors) and the decision of what to
label is made here in Python, in document order.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from ..core.types import LabeledElement

logger = logging.getLogger(__name__)

INTERACTIVE_SELECTOR = (
    "a, button, input, textarea, select, details, [role=button], [role=link], "
    "[role=treeitem], [contenteditable], [tabindex]"
)
LABEL_ATTR = "gpt-link-text"
# Temporary tag tying a collected candidate to its element until labels are written
INDEX_ATTR = "data-webai-index"
MIN_SIZE = 5
FALLBACK_LABEL_FIELDS = ("aria_label", "title", "placeholder", "value")

_COLLECT_JS = """
([selector, attr, indexAttr]) => {
    document.querySelectorAll(`[${attr}]`).forEach((el) => el.removeAttribute(attr));
    document.querySelectorAll(`[${indexAttr}]`).forEach((el) => el.removeAttribute(indexAttr));
    document.querySelectorAll('a[target="_blank"]').forEach((el) => el.removeAttribute("target"));

    const styleOf = (el) => {
        const s = window.getComputedStyle(el);
        return {
            width: s.width,
            height: s.height,
            opacity: s.opacity,
            display: s.display,
            visibility: s.visibility,
        };
    };

    const elements = Array.from(document.querySelectorAll(selector));
    for (const el of elements) {
        el.style.border = "2px solid red";
        el.style.borderRadius = "0px";
    }

    const candidates = elements.map((el, index) => {
        el.setAttribute(indexAttr, String(index));
        const styles = [];
        for (let node = el; node; node = node.parentElement) {
            styles.push(styleOf(node));
        }
        const r = el.getBoundingClientRect();
        return {
            index,
            tag: el.tagName.toLowerCase(),
            rect: { x: r.left, y: r.top, width: r.width, height: r.height },
            text: el.textContent || "",
            aria_label: el.getAttribute("aria-label") || "",
            title: el.getAttribute("title") || "",
            placeholder: el.getAttribute("placeholder") || "",
            value: typeof el.value === "string" ? el.value : "",
            styles,
        };
    });

    return {
        viewport: {
            width: window.innerWidth || document.documentElement.clientWidth,
            height: window.innerHeight || document.documentElement.clientHeight,
        },
        candidates,
    };
}
"""

_LABEL_JS = """
([indexAttr, attr, labels]) => {
    let written = 0;
    for (const [index, label] of labels) {
        const el = document.querySelector(`[${indexAttr}="${index}"]`);
        if (el) {
            el.setAttribute(attr, label);
            written += 1;
        }
    }
    document.querySelectorAll(`[${indexAttr}]`).forEach((el) => el.removeAttribute(indexAttr));
    return written;
}
"""


def sanitize_label(text: str) -> str:
    # Keep only alphanumerics and spaces, then collapse whitespace
    s = re.sub(r"[^a-zA-Z0-9 ]", "", text or "")
    return re.sub(r" {2,}", " ", s).strip()


def _is_zero(size: Optional[str]) -> bool:
    return (size or "").strip() in ("0", "0px")


def is_style_visible(style: Dict[str, Any]) -> bool:
    return not (
        _is_zero(style.get("width"))
        or _is_zero(style.get("height"))
        or str(style.get("opacity", "")).strip() == "0"
        or style.get("display") == "none"
        or style.get("visibility") == "hidden"
    )


def is_in_viewport(rect: Dict[str, float], viewport: Dict[str, float]) -> bool:
    top, left = rect["y"], rect["x"]
    bottom, right = top + rect["height"], left + rect["width"]
    return (
        top >= 0
        and left >= 0
        and bottom <= viewport["height"]
        and right <= viewport["width"]
    )


def is_element_visible(candidate: Dict[str, Any], viewport: Dict[str, float]) -> bool:
    """Visible = the element and all its ancestors render, and it sits in the viewport."""
    styles = candidate.get("styles") or []
    if not styles:
        return False
    if not all(is_style_visible(s) for s in styles):
        return False
    return is_in_viewport(candidate["rect"], viewport)


def should_label(candidate: Dict[str, Any], viewport: Dict[str, float]) -> bool:
    rect = candidate.get("rect") or {}
    if rect.get("width", 0) <= MIN_SIZE or rect.get("height", 0) <= MIN_SIZE:
        return False
    return is_element_visible(candidate, viewport)


def label_for(candidate: Dict[str, Any]) -> str:
    label = sanitize_label(candidate.get("text", ""))
    if label:
        return label
    for field in FALLBACK_LABEL_FIELDS:
        label = sanitize_label(candidate.get(field, ""))
        if label:
            return label
    return ""


def select_labels(
    candidates: List[Dict[str, Any]], viewport: Dict[str, float]
) -> List[LabeledElement]:
    """Pick the candidates to label, preserving document order."""
    labeled: List[LabeledElement] = []
    for c in candidates:
        if not should_label(c, viewport):
            continue
        rect = c["rect"]
        labeled.append(
            {
                "index": c["index"],
                "tag": c.get("tag", ""),
                "label": label_for(c),
                "box": {
                    "x": rect["x"],
                    "y": rect["y"],
                    "width": rect["width"],
                    "height": rect["height"],
                },
            }
        )
    return labeled


def annotate_page(page) -> List[LabeledElement]:
    """Outline interactive elements and label the visible ones. Returns the labeled set."""
    snapshot = page.evaluate(_COLLECT_JS, [INTERACTIVE_SELECTOR, LABEL_ATTR, INDEX_ATTR])
    candidates = snapshot.get("candidates") or []
    viewport = snapshot.get("viewport") or {"width": 0, "height": 0}

    labeled = select_labels(candidates, viewport)
    written = page.evaluate(
        _LABEL_JS,
        [INDEX_ATTR, LABEL_ATTR, [[e["index"], e["label"]] for e in labeled]],
    )
    if written != len(labeled):
        logger.warning(
            "DOM changed while labeling: wrote %s of %d labels", written, len(labeled)
        )
    logger.info(
        "Annotated %d interactive elements, %d visible and labeled",
        len(candidates),
        len(labeled),
    )
    return labeled
