"""Agent error types"""


class AgentError(Exception):
    """Base class for errors raised out of the agent loop"""


class ProviderError(AgentError):
    """A provider could not be reached, configured, or returned a non-2xx status"""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class StreamError(AgentError):
    """The transport ended a response stream with an error status"""


class EmptyResponseError(AgentError):
    """The model finished without text or tool calls for a reason other than 'stop'"""

    def __init__(self, finish_reason: str | None):
        self.finish_reason = finish_reason
        super().__init__(f"No response generated ({finish_reason or 'unknown'})")
