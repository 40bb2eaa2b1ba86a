from collections.abc import Callable, Iterable

import structlog

from field_billing.core.domain.events.events import DomainEvent

logger = structlog.get_logger(__name__)

Listener = Callable[[DomainEvent], None]


class EventDispatcher:
    """
    Dispatcher síncrono de eventos de domínio.

    Um listener que falha é registrado no log e não impede os demais; quem
    publicou o evento recebe apenas a contagem de falhas.
    """
    def __init__(self) -> None:
        self._listeners: dict[type[DomainEvent], list[Listener]] = {}

    def subscribe(self, event_type: type[DomainEvent], listener: Listener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)
        logger.debug("event.subscribed", event_type=event_type.__name__, listener=_name(listener))

    def unsubscribe(self, event_type: type[DomainEvent], listener: Listener) -> None:
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def dispatch(self, event: DomainEvent) -> int:
        listeners = list(self._listeners.get(type(event), []))
        logger.info("event.dispatch", event_name=type(event).__name__, listeners=len(listeners))
        failures = 0
        for listener in listeners:
            try:
                listener(event)
            except Exception as exc:
                failures += 1
                logger.error(
                    "event.listener_error",
                    event_name=type(event).__name__,
                    listener=_name(listener),
                    error=str(exc),
                    exc_info=True,
                )
        return failures

    def dispatch_all(self, events: Iterable[DomainEvent]) -> int:
        return sum(self.dispatch(evt) for evt in events)


def _name(listener: Listener) -> str:
    return getattr(listener, "__qualname__", listener.__class__.__name__)
