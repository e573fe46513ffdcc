import argparse
import logging
import sys
from typing import List, Optional

from .agents.vision import build_llm
from .core.config import HEADLESS, LOG_FILE, LOG_LEVEL, MAX_STEPS, MAX_TOKENS, MODEL_NAME, START_URL
from .core.errors import AgentError
from .core.logs import setup_logging
from .core.orchestrator import print_summary, run

logger = logging.getLogger(__name__)


def read_prompt(label: str = "You: ") -> Optional[str]:
    try:
        return input(label)
    except EOFError:
        return None


def interactive_follow_up(answer: str) -> Optional[str]:
    print(f"\nAgent: {answer}\n")
    return read_prompt()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webai-agent",
        description="Browse the web with a vision LLM that reads annotated screenshots.",
    )
    parser.add_argument("--url", default=START_URL or None, help="Page to open before the first model call")
    parser.add_argument("--prompt", help="Task for the agent; read from stdin when omitted")
    parser.add_argument("--show-browser", action="store_true", help="Run Chromium with a visible window")
    parser.add_argument("--model", default=MODEL_NAME, help="Vision model name")
    parser.add_argument("--max-steps", type=int, default=MAX_STEPS)
    parser.add_argument("--log-file", default=LOG_FILE)
    parser.add_argument("--once", action="store_true", help="Stop after the first answer")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file, LOG_LEVEL)

    prompt = args.prompt
    if not prompt:
        print("What would you like the agent to do?")
        try:
            prompt = (read_prompt() or "").strip()
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            return 130
    if not prompt:
        print("No prompt given, exiting.")
        return 1

    try:
        final_state = run(
            prompt,
            start_url=args.url,
            llm=build_llm(args.model, MAX_TOKENS),
            ask_user=None if args.once else interactive_follow_up,
            max_steps=args.max_steps,
            headless=HEADLESS and not args.show_browser,
        )
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except AgentError as e:
        logger.error("Agent run failed: %s", e)
        return 1

    print_summary(prompt, final_state)
    return 0


if __name__ == "__main__":
    sys.exit(main())
