import logging
from typing import Any, List

from langchain_core.messages import BaseMessage, HumanMessage
from langchain_openai import ChatOpenAI

from ..core.errors import ModelError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a website crawler. You will be given instructions on what to do by browsing. "
    "You are connected to a web browser and you will be given the screenshot of the website you are on. "
    "The links on the website will be highlighted in red in the screenshot. "
    "Always read what is in the screenshot. Don't guess link names.\n"
    "\n"
    "You can go to a specific URL by answering with the following JSON format:\n"
    '{"url": "url goes here"}\n'
    "\n"
    "You can click links on the website by referencing the text inside of the link/button, "
    "by answering in the following JSON format:\n"
    '{"click": "Text in link"}\n'
    "\n"
    "Once you are on a URL and you have found the answer to the user's question, "
    "you can answer with a regular message.\n"
    "\n"
    "Use google search by setting a sub-page like 'https://google.com/search?q=search' if applicable. "
    "Prefer to use Google for simple queries. "
    "If the user provides a direct URL, go to that one. Do not make up links."
)

SCREENSHOT_PROMPT = (
    "Here's the screenshot of the website you are on right now. "
    'You can click on links with {"click": "Link text"} or you can crawl to another URL '
    "if this one is incorrect. If you find the answer to the user's question, "
    "you can respond normally."
)

OMITTED_SCREENSHOT = "[An earlier screenshot was here and has been omitted.]"


def build_llm(model: str, max_tokens: int) -> ChatOpenAI:
    return ChatOpenAI(model=model, max_tokens=max_tokens, timeout=60, max_retries=1)


def screenshot_message(data_url: str) -> HumanMessage:
    return HumanMessage(
        content=[
            {"type": "text", "text": SCREENSHOT_PROMPT},
            {"type": "image_url", "image_url": {"url": data_url}},
        ]
    )


def error_message(text: str) -> HumanMessage:
    return HumanMessage(content=f"ERROR: {text}")


def _has_image(msg: BaseMessage) -> bool:
    content = msg.content
    return isinstance(content, list) and any(
        isinstance(b, dict) and b.get("type") == "image_url" for b in content
    )


def prune_screenshots(messages: List[BaseMessage], keep: int) -> List[BaseMessage]:
    """Keep image blocks only in the last ``keep`` screenshot messages."""
    image_positions = [i for i, m in enumerate(messages) if _has_image(m)]
    stale = image_positions[: max(len(image_positions) - max(keep, 0), 0)]
    if not stale:
        return messages

    pruned = list(messages)
    for i in stale:
        blocks = []
        for b in messages[i].content:
            if isinstance(b, dict) and b.get("type") == "image_url":
                blocks.append({"type": "text", "text": OMITTED_SCREENSHOT})
            else:
                blocks.append(b)
        pruned[i] = HumanMessage(content=blocks)
    logger.debug("Pruned %d stale screenshots from history", len(stale))
    return pruned


def message_text(content: Any) -> str:
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
            elif isinstance(block, str):
                parts.append(block)
        return "\n".join(parts).strip()
    return str(content)


def ask_model(llm, messages: List[BaseMessage]) -> str:
    """Send the conversation to the vision model and return its reply text."""
    logger.info("Calling vision model with %d messages", len(messages))
    try:
        result = llm.invoke(messages)
    except Exception as e:
        logger.error("Model call failed: %s", e)
        raise ModelError(f"Model call failed: {e}") from e

    text = message_text(getattr(result, "content", result))
    if not text:
        raise ModelError("Model returned an empty reply")
    logger.info("Model replied: %s", text)
    return text
