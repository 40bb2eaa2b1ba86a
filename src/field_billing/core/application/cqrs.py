from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

import structlog

from field_billing.core.domain.events.events import DomainEvent
from field_billing.core.domain.services.event_dispatcher import EventDispatcher

# ───────────────────────────────────────────────
# CQRS síncrono com log de performance
# ───────────────────────────────────────────────
C = TypeVar('C')  # Command type
Q = TypeVar('Q')  # Query filtros type
R = TypeVar('R')  # Query result type

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CommandDTO:
    """Base para todos os comandos de escrita."""
    pass


@dataclass(frozen=True)
class QueryDTO(Generic[Q]):
    """Base para consultas de leitura."""
    filtros: Q


class CommandHandler(Protocol, Generic[C]):
    def handle(self, command: C) -> Any:
        ...


class QueryHandler(Protocol, Generic[Q, R]):
    def handle(self, query: QueryDTO[Q]) -> R:
        ...


class _Bus:
    kind = "handler"

    def __init__(self) -> None:
        self._handlers: dict[type, Any] = {}

    def register(self, message_type: type, handler: Any) -> None:
        self._handlers[message_type] = handler
        logger.debug(f"{self.kind}.registered", message=message_type.__name__)

    def _run(self, message: Any) -> Any:
        handler = self._handlers.get(type(message))
        if handler is None:
            raise ValueError(f"Nenhum handler para {self.kind}: {type(message).__name__}")
        start = time.perf_counter()
        result = handler.handle(message)
        logger.info(
            f"{self.kind}.executed",
            message=type(message).__name__,
            duration=f"{time.perf_counter() - start:.3f}s",
        )
        return result


class CommandBus(_Bus):
    kind = "command"

    def dispatch(self, command: CommandDTO) -> Any:
        return self._run(command)


class QueryBus(_Bus):
    kind = "query"

    def dispatch(self, query: QueryDTO[Any]) -> Any:
        return self._run(query)


def _events_of(result: Any) -> list[DomainEvent]:
    if isinstance(result, DomainEvent):
        return [result]
    events = getattr(result, "events", None)
    if events:
        return [e for e in events if isinstance(e, DomainEvent)]
    return []


class CommandBusImpl(CommandBus):
    """Após o handler, publica os eventos carregados pelo resultado do comando."""

    def __init__(self, dispatcher: EventDispatcher):
        super().__init__()
        self.dispatcher = dispatcher

    def dispatch(self, command: CommandDTO) -> Any:
        result = super().dispatch(command)
        events = _events_of(result)
        if events:
            self.dispatcher.dispatch_all(events)
        return result
