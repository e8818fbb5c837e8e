"""Startup/shutdown events run around the listener."""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from portfolio.core.logger import LogIcon, logger
from portfolio.core.settings import settings as st


class State:
    """Values produced by startup events, keyed by event name."""

    __slots__ = ("_values",)

    def __init__(self) -> None:
        object.__setattr__(self, "_values", {})

    def __getattr__(self, name: str) -> Any:
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(f"State has no attribute '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        self._values[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __repr__(self) -> str:
        return f"State({sorted(self._values)})"

    def pop(self, name: str, default: Any = None) -> Any:
        return self._values.pop(name, default)


T = TypeVar("T")


class BaseEvent(ABC, Generic[T]):
    """One startup step; its result is stored on the shared state under ``name``."""

    name: str
    state: State

    @abstractmethod
    async def startup(self) -> T: ...

    async def shutdown(self, value: T) -> None:  # noqa: B027
        """Release whatever ``startup`` produced. No-op unless overridden."""

    @classmethod
    def has_shutdown(cls) -> bool:
        return cls.shutdown is not BaseEvent.shutdown


class Lifespan:
    """Ordered event registry. Startup runs events in order, shutdown in reverse."""

    def __init__(self) -> None:
        self._registered: list[type[BaseEvent[Any]]] = []
        self._started: list[BaseEvent[Any]] = []
        self.state: State | None = None

    def register(self, event_cls: type[BaseEvent[Any]]) -> "Lifespan":
        self._registered.append(event_cls)
        return self

    @property
    def events(self) -> list[BaseEvent[Any]]:
        return list(self._started)

    async def startup(self) -> None:
        logger.info("Lifespan startup", icon=LogIcon.START, version=st.APP_VERSION, events=len(self._registered))
        self.state = State()
        self._started = []

        for event_cls in self._registered:
            event = event_cls()
            event.state = self.state
            setattr(self.state, event.name, await event.startup())
            self._started.append(event)
            logger.debug("Event ready", icon=LogIcon.SUCCESS, event_name=event.name)

        logger.info("Lifespan ready", icon=LogIcon.COMPLETE)

    async def shutdown(self) -> None:
        if self.state is None:
            logger.info("Lifespan never started", icon=LogIcon.WARNING)
            return

        while self._started:
            event = self._started.pop()
            value = self.state.pop(event.name)
            if event.has_shutdown():
                await event.shutdown(value)
                logger.debug("Event closed", icon=LogIcon.STOP, event_name=event.name)

        logger.info("Lifespan shutdown complete", icon=LogIcon.COMPLETE)
