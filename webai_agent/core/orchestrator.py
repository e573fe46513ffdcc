import logging
from pathlib import Path
from typing import Any, Callable, Optional
from uuid import uuid4

from langchain_core.messages import HumanMessage, SystemMessage
from langgraph.errors import GraphRecursionError

from ..agents.vision import SYSTEM_PROMPT
from .browser import BrowserSession, launch_browser
from .config import HEADLESS, KEEP_SCREENSHOTS, MAX_STEPS, OUT_DIR, TIMEOUT_MS, VIEWPORT
from .errors import AgentError
from .graph import build_graph
from .types import AgentState

logger = logging.getLogger(__name__)


def run(
    prompt: str,
    start_url: Optional[str] = None,
    llm: Any = None,
    page: Any = None,
    ask_user: Optional[Callable[[str], Optional[str]]] = None,
    max_steps: int = MAX_STEPS,
    headless: bool = HEADLESS,
    out_dir: Path = OUT_DIR,
) -> AgentState:
    """Run the browse/consult/act loop until the user stops or the step budget runs out."""
    run_id = str(uuid4())
    run_dir = Path(out_dir) / f"run_{run_id}"
    run_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Starting run %s with prompt: %s", run_id, prompt)

    session: Optional[BrowserSession] = None
    if page is None:
        session = launch_browser(headless=headless, viewport=VIEWPORT)
        page = session.page

    state: AgentState = {
        "run_id": run_id,
        "run_dir": str(run_dir),
        "prompt": prompt,
        "messages": [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=prompt)],
        "pending_url": start_url or None,
        "current_url": None,
        "screenshot_path": None,
        "shots": 0,
        "elements": [],
        "reply": None,
        "instruction": None,
        "answer": None,
        "answers": [],
        "step": 0,
        "total_steps": 0,
        "max_steps": max_steps,
        "done": False,
        "completion_via": None,
        "page": page,
    }

    app = build_graph()
    config = {
        "run_name": "webai_agent",
        # browse + consult + act per step of one prompt, plus slack
        "recursion_limit": max_steps * 4 + 10,
        "configurable": {
            "llm": llm,
            "ask_user": ask_user,
            "timeout_ms": TIMEOUT_MS,
            "keep_screenshots": KEEP_SCREENSHOTS,
        },
    }
    try:
        final_state = app.invoke(state, config=config)
        # Not done means the user asked a follow-up; each prompt gets a fresh budget
        while not final_state.get("done"):
            final_state = app.invoke(final_state, config=config)
    except GraphRecursionError as e:
        raise AgentError(f"Agent loop did not settle: {e}") from e
    finally:
        if session is not None:
            session.close()
            logger.info("Browser closed")

    logger.info(
        "Run completed after %d steps (%s)",
        final_state.get("total_steps", 0),
        final_state.get("completion_via"),
    )
    return final_state


def print_summary(prompt: str, final_state: AgentState) -> None:
    print("\n=== WebAI agent result ===")
    print("Prompt:", prompt)
    print("Run dir:", final_state.get("run_dir"))
    print("Steps:", final_state.get("total_steps", 0))
    print("Finished via:", final_state.get("completion_via"))
    print("Last URL:", final_state.get("current_url"))
    print("Last screenshot:", final_state.get("screenshot_path"))
    answers = final_state.get("answers") or []
    if answers:
        print("Answer:", answers[-1])
