class AgentError(RuntimeError):
    """Base class for agent failures."""


class ConfigError(AgentError):
    pass


class ElementNotFoundError(AgentError):
    """Raised when no labeled element matches a click instruction."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Can't find a labeled element matching '{text}'")


class ModelError(AgentError):
    pass
