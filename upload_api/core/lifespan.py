"""Startup and shutdown of the shared resources behind the upload routes."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Coroutine
from typing import Any

from robyn import Robyn

from upload_api.core.logger import LogIcon, logger
from upload_api.core.settings import UploadConfig
from upload_api.core.settings import settings as st

AsyncHandler = Callable[[], Coroutine[Any, Any, None]]


class State:
    """Attribute-style container injected into handlers as ``global_dependencies["state"]``."""

    __slots__ = ("_data",)

    def __init__(self) -> None:
        object.__setattr__(self, "_data", {})

    def __getattr__(self, name: str) -> Any:
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(f"State has no attribute '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        self._data[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self._data

    def __iter__(self):
        return iter(self._data)

    def __repr__(self) -> str:
        return f"State({sorted(self._data)})"

    def get(self, name: str, default: Any = None) -> Any:
        return self._data.get(name, default)

    def clear(self) -> None:
        self._data.clear()


class BaseEvent[T](ABC):
    """A resource created at startup and published on the state under ``name``.

    Events receive the upload policy at construction; they never read the
    global settings themselves.
    """

    name: str
    state: State

    def __init__(self, config: UploadConfig) -> None:
        self.config = config

    @abstractmethod
    async def startup(self) -> T: ...

    async def shutdown(self, instance: T) -> None:  # noqa: B027
        """Release ``instance``. Only called when overridden."""

    @classmethod
    def has_shutdown(cls) -> bool:
        return cls.shutdown is not BaseEvent.shutdown


class Lifespan:
    """Runs registered events in order on startup and in reverse on shutdown.

    If an event fails to start, the events already started are shut down
    before the error propagates, so the server never runs half initialised.
    """

    def __init__(self, app: Robyn, config: UploadConfig) -> None:
        self._app = app
        self._config = config
        self._event_classes: list[type[BaseEvent[Any]]] = []
        self._events: list[BaseEvent[Any]] = []
        self._state: State | None = None

    def register(self, event_cls: type[BaseEvent[Any]]) -> "Lifespan":
        """Register an event class. Returns self for chaining."""
        self._event_classes.append(event_cls)
        return self

    @property
    def state(self) -> State | None:
        return self._state

    @property
    def events(self) -> list[BaseEvent[Any]]:
        return self._events

    async def _start_event(self, event_cls: type[BaseEvent[Any]]) -> None:
        event = event_cls(self._config)
        event.state = self._state
        logger.info("Starting event", icon=LogIcon.PROCESSING, event_name=event.name)
        setattr(self._state, event.name, await event.startup())
        self._events.append(event)
        logger.info("Event ready", icon=LogIcon.SUCCESS, event_name=event.name)

    async def _stop_events(self) -> None:
        while self._events:
            event = self._events.pop()
            if event.has_shutdown() and event.name in self._state:
                logger.info("Shutting down event", icon=LogIcon.PROCESSING, event_name=event.name)
                await event.shutdown(getattr(self._state, event.name))

    @property
    def startup(self) -> AsyncHandler:
        """Startup handler for ``app.startup_handler``."""

        async def _startup() -> None:
            logger.info(
                "Starting application lifespan",
                icon=LogIcon.START,
                version=st.API_VERSION,
                uploads=str(self._config.uploads_path),
            )
            self._state = State()
            self._state.config = self._config

            for event_cls in self._event_classes:
                try:
                    await self._start_event(event_cls)
                except Exception:
                    logger.exception("Event failed to start", icon=LogIcon.CRITICAL, event_name=event_cls.name)
                    await self._stop_events()
                    raise

            self._app.inject_global(state=self._state)
            logger.info("App state ready", icon=LogIcon.COMPLETE, events=len(self._events))

        return _startup

    @property
    def shutdown(self) -> AsyncHandler:
        """Shutdown handler for ``app.shutdown_handler``."""

        async def _shutdown() -> None:
            if not self._state:
                logger.info("No state to cleanup", icon=LogIcon.WARNING)
                return

            logger.info("Cleaning up app state", icon=LogIcon.TOOL, events=len(self._events))
            await self._stop_events()
            self._state.clear()
            logger.info("Cleanup complete", icon=LogIcon.COMPLETE)

        return _shutdown


def create_lifespan(app: Robyn, config: UploadConfig) -> Lifespan:
    return Lifespan(app, config)
