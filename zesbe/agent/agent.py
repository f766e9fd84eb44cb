"""Main agent - drives the step loop, owns history and usage stats"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from zesbe.agent.callbacks import ChatCallbacks, StepInfo, fire
from zesbe.agent.message import AgentStats, ConversationMessage
from zesbe.agent.prompt import DEFAULT_SYSTEM_PROMPT, build_system_prompt, load_project_context
from zesbe.agent.step import StepExecutor, StepResult
from zesbe.provider import Provider, create_provider, get_provider_spec
from zesbe.session.store import DEFAULT_SESSION, SessionInfo, SessionResult, SessionStore, generate_summary
from zesbe.tool.registry import ToolRegistry

logger = logging.getLogger(__name__)

# Step cap applied when max_steps is 0 (unlimited)
UNLIMITED_STEPS = 1000
DEFAULT_TRIM = 20


class SkillsProvider(Protocol):
    def get_skills_context(self) -> str:
        ...


@dataclass
class ChatResult:
    """Outcome of one ``Agent.chat`` call"""
    text: str = ""
    steps: int = 0
    max_steps_reached: bool = False
    warning: str | None = None
    error: BaseException | None = None


def estimate_tokens(text: str) -> int:
    """Rough token estimation (~4 chars per token)"""
    return len(text) // 4


class Agent:
    """AI coding agent that converses with a provider and runs local tools.

    Collaborators (tool registry, skills, session store, transport) are
    passed in; anything omitted gets a default instance.
    """

    def __init__(
        self,
        provider_name: str = "openai",
        model: str = "gpt-4o",
        *,
        provider: Provider | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        supports_tools: bool | None = None,
        tools: ToolRegistry | None = None,
        skills: SkillsProvider | None = None,
        sessions: SessionStore | None = None,
        yolo: bool = False,
        stream: bool = True,
        max_steps: int = 0,
        cwd: Path | str | None = None,
        system_prompt: str | None = None,
    ):
        self.provider_name = provider_name
        self.model = model
        self.spec = get_provider_spec(provider_name, base_url=base_url, supports_tools=supports_tools)
        self.provider = provider or create_provider(self.spec, model, api_key=api_key)
        self.tools = tools or ToolRegistry()
        self.skills = skills
        self.sessions = sessions or SessionStore()
        self.yolo = yolo
        self.stream = stream
        self.max_steps = max_steps
        self.cwd = Path(cwd or Path.cwd()).resolve()

        self.history: list[ConversationMessage] = []
        self.stats = AgentStats()
        self._lock = asyncio.Lock()

        self.project_context = load_project_context(self.cwd)
        self._base_system_prompt = system_prompt or DEFAULT_SYSTEM_PROMPT
        self.system_prompt = ""
        self.refresh_system_prompt()

    @classmethod
    def from_config(cls, config, **kwargs) -> "Agent":
        """Build an agent from a ``zesbe.config.config.Config``"""
        settings = config.providers.get(config.provider)
        kwargs.setdefault("api_key", config.get_api_key())
        kwargs.setdefault("base_url", settings.base_url if settings else None)
        kwargs.setdefault("supports_tools", settings.supports_tools if settings else None)
        kwargs.setdefault("system_prompt", config.system_prompt)
        return cls(
            config.provider,
            config.model,
            yolo=config.yolo,
            stream=config.stream,
            max_steps=config.max_steps,
            **kwargs,
        )

    # System prompt

    def refresh_system_prompt(self):
        """Rebuild the prompt, e.g. after skills are loaded or unloaded"""
        skills_context = self.skills.get_skills_context() if self.skills else ""
        self.system_prompt = build_system_prompt(
            self._base_system_prompt,
            self.project_context,
            skills_context,
        )

    # History

    def clear_history(self):
        self.history = []

    def trim_history(self, max_messages: int = DEFAULT_TRIM):
        """Keep only the most recent ``max_messages`` entries"""
        if len(self.history) > max_messages:
            self.history = self.history[-max_messages:] if max_messages > 0 else []

    # Sessions

    def generate_summary(self) -> str:
        return generate_summary(self.history)

    def save_session(self, name: str = DEFAULT_SESSION) -> SessionResult:
        return self.sessions.save(
            name,
            cwd=str(self.cwd),
            provider=self.provider_name,
            model=self.model,
            history=self.history,
            stats=self.stats,
        )

    def load_session(self, name: str = DEFAULT_SESSION) -> SessionResult:
        """Replace history with a saved session and merge its stats"""
        result = self.sessions.load(name)
        if result.success:
            self.history = list(result.data["history"])
            self.stats.merge(result.data.get("stats") or {})
            logger.info(f"Loaded session {name} ({result.message_count} messages)")
        return result

    def list_sessions(self) -> list[SessionInfo]:
        return self.sessions.list_sessions()

    # Chat

    def _executor(self) -> StepExecutor:
        return StepExecutor(
            provider=self.provider,
            tools=self.tools,
            supports_tools=self.spec.supports_tools,
            stream=self.stream,
            yolo=self.yolo,
            context={"cwd": self.cwd},
        )

    def _record_usage(self, result: StepResult):
        if result.usage and (result.usage.prompt_tokens or result.usage.completion_tokens):
            self.stats.add_usage(result.usage.prompt_tokens, result.usage.completion_tokens)
            return
        output = result.text + "".join(tc.arguments_json for tc in result.tool_calls)
        self.stats.add_usage(result.prompt_chars // 4, estimate_tokens(output))

    async def chat(self, user_message: str, callbacks: ChatCallbacks | None = None) -> ChatResult:
        """Run one user turn to completion.

        ``on_end`` fires exactly once on success or when the step limit runs
        out; on failure ``on_error`` fires instead, or the error is re-raised
        when no ``on_error`` is set. Concurrent calls are served in order.
        """
        callbacks = callbacks or ChatCallbacks()

        async with self._lock:
            self.history.append(ConversationMessage(role="user", content=user_message))
            self.stats.requests += 1
            outcome = ChatResult()

            try:
                await self._run(callbacks, outcome)
            except Exception as e:
                logger.error(f"Chat failed after {outcome.steps} steps: {e}")
                if callbacks.on_error is None:
                    raise
                outcome.error = e
                await fire(callbacks.on_error, e)
                return outcome

            await fire(callbacks.on_end)
            return outcome

    async def _run(self, callbacks: ChatCallbacks, outcome: ChatResult):
        max_steps = self.max_steps if self.max_steps > 0 else UNLIMITED_STEPS
        executor = self._executor()

        await fire(callbacks.on_start)

        while True:
            result = await executor.step(self.history, self.system_prompt, callbacks)
            outcome.steps += 1
            outcome.text += result.text
            self.stats.tool_calls += len(result.tool_calls)
            self._record_usage(result)

            has_more = result.has_tool_calls and outcome.steps < max_steps
            await fire(callbacks.on_step_finish, StepInfo(
                step_number=outcome.steps,
                text=result.text,
                tool_calls=result.tool_calls,
                has_more_steps=has_more,
            ))

            if not result.has_tool_calls:
                if not result.text:
                    logger.debug("Model returned neither text nor tool calls - stopping")
                break

            if not has_more:
                warning = f"Maximum steps reached ({max_steps}) - stopping"
                logger.warning(warning)
                outcome.max_steps_reached = True
                outcome.warning = warning
                await fire(callbacks.on_warning, warning)
                break

            logger.debug(f"Step {outcome.steps} requested {len(result.tool_calls)} tools, continuing")
