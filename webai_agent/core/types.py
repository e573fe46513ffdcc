from typing import Any, Dict, List, Optional, TypedDict

from langchain_core.messages import BaseMessage


class Box(TypedDict):
    x: float
    y: float
    width: float
    height: float


class LabeledElement(TypedDict):
    index: int
    tag: str
    label: str
    box: Box


class AgentState(TypedDict, total=False):
    run_id: str
    run_dir: str
    prompt: str
    messages: List[BaseMessage]
    # Navigation
    pending_url: Optional[str]
    current_url: Optional[str]
    screenshot_path: Optional[str]
    shots: int
    elements: List[LabeledElement]
    # Model turn
    reply: Optional[str]
    instruction: Optional[Dict[str, str]]
    answer: Optional[str]
    answers: List[str]
    step: int
    total_steps: int
    max_steps: int
    done: bool
    completion_via: Optional[str]
    # Live browser handle (kept in-memory for single-run)
    page: Any
