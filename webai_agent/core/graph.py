import logging
from typing import Any, Optional

from langchain_core.messages import AIMessage, HumanMessage
from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, StateGraph
from playwright.sync_api import Error as PlaywrightError

from ..agents.vision import (
    ask_model,
    build_llm,
    error_message,
    prune_screenshots,
    screenshot_message,
)
from ..dom.resolve import click_label, parse_instruction
from ..utils.imaging import image_to_data_url, screenshot_path
from .browser import browse_url, capture
from .config import KEEP_SCREENSHOTS, MAX_STEPS, MAX_TOKENS, MODEL_NAME, TIMEOUT_MS
from .errors import ElementNotFoundError
from .types import AgentState

logger = logging.getLogger(__name__)

STOP_WORDS = {"", "exit", "quit"}


def _option(config: Optional[RunnableConfig], key: str, default: Any = None) -> Any:
    value = ((config or {}).get("configurable") or {}).get(key)
    return default if value is None else value


def _capture_into(state: AgentState, config: Optional[RunnableConfig]) -> None:
    """Screenshot the current page and append it to the conversation."""
    page = state["page"]
    shot = state.get("shots", 0) + 1
    state["shots"] = shot

    path = screenshot_path(state["run_dir"], shot)
    state["elements"] = capture(page, path)
    state["screenshot_path"] = str(path)
    state["current_url"] = getattr(page, "url", None)

    data_url = image_to_data_url(path, max_size=_option(config, "image_max_size"))
    state["messages"].append(screenshot_message(data_url))


def browse(state: AgentState, config: RunnableConfig) -> AgentState:
    """Navigate to the pending URL (if any) and show the model the result."""
    url = state.get("pending_url")
    if not url:
        return state
    state["pending_url"] = None

    try:
        browse_url(state["page"], url, _option(config, "timeout_ms", TIMEOUT_MS))
        _capture_into(state, config)
    except PlaywrightError as e:
        logger.warning("Failed to open %s: %s", url, e)
        state["messages"].append(
            error_message(f"I was unable to open {url} ({e}). Try a different URL.")
        )
    return state


def consult(state: AgentState, config: RunnableConfig) -> AgentState:
    """Ask the vision model for the next move."""
    llm = _option(config, "llm") or build_llm(MODEL_NAME, MAX_TOKENS)
    keep = _option(config, "keep_screenshots", KEEP_SCREENSHOTS)

    messages = prune_screenshots(state["messages"], keep)
    reply = ask_model(llm, messages)

    messages.append(AIMessage(content=reply))
    state["messages"] = messages
    state["reply"] = reply
    state["step"] = state.get("step", 0) + 1
    state["total_steps"] = state.get("total_steps", 0) + 1
    return state


def act(state: AgentState, config: RunnableConfig) -> AgentState:
    """Carry out the model's reply: navigate, click, or record an answer."""
    instruction = parse_instruction(state.get("reply") or "")
    state["instruction"] = instruction._asdict()
    state["answer"] = None
    logger.info("Step %d: %s %r", state.get("step", 0), instruction.kind, instruction.value)

    if instruction.kind == "url":
        if instruction.value:
            state["pending_url"] = instruction.value
        else:
            state["messages"].append(error_message("The URL you gave was empty."))

    elif instruction.kind == "click":
        try:
            click_label(
                state["page"], instruction.value, _option(config, "timeout_ms", TIMEOUT_MS)
            )
            _capture_into(state, config)
        except ElementNotFoundError as e:
            state["messages"].append(
                error_message(
                    f"I was unable to click that element ({e}). "
                    "Use the exact text of a link outlined in red."
                )
            )
        except PlaywrightError as e:
            logger.warning("Click on '%s' failed: %s", instruction.value, e)
            state["messages"].append(
                error_message(f"I was unable to click that element ({e}).")
            )

    else:
        state["answer"] = instruction.value
        state["answers"] = (state.get("answers") or []) + [instruction.value]
        logger.info("Answer: %s", instruction.value)
        return state

    if state.get("step", 0) >= state.get("max_steps", MAX_STEPS):
        logger.warning("Max steps (%d) reached without an answer.", state.get("max_steps", MAX_STEPS))
        state["done"] = True
        state["completion_via"] = "max_steps"
    return state


def ask_user(state: AgentState, config: RunnableConfig) -> AgentState:
    """Hand the answer to the user and take their follow-up, if any."""
    prompt_fn = _option(config, "ask_user")
    follow_up = prompt_fn(state.get("answer") or "") if prompt_fn else None

    if follow_up is None or follow_up.strip().lower() in STOP_WORDS:
        state["done"] = True
        state["completion_via"] = "answer"
        return state

    # A follow-up starts a fresh prompt with its own step budget
    state["messages"].append(HumanMessage(content=follow_up.strip()))
    state["answer"] = None
    state["step"] = 0
    return state


def route_after_act(state: AgentState) -> str:
    if state.get("done"):
        return END
    if state.get("answer") is not None:
        return "ask_user"
    if state.get("pending_url"):
        return "browse"
    return "consult"


def build_graph():
    graph = StateGraph(AgentState)
    graph.add_node("browse", browse)
    graph.add_node("consult", consult)
    graph.add_node("act", act)
    graph.add_node("ask_user", ask_user)

    graph.set_entry_point("browse")
    graph.add_edge("browse", "consult")
    graph.add_edge("consult", "act")

    graph.add_conditional_edges(
        "act",
        route_after_act,
        {END: END, "ask_user": "ask_user", "browse": "browse", "consult": "consult"},
    )
    # Each invocation covers one prompt; the orchestrator re-invokes for follow-ups
    graph.add_edge("ask_user", END)

    return graph.compile()
