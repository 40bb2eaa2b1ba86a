from dataclasses import dataclass, field
from unittest import TestCase

from field_billing.core.application.cqrs import CommandBusImpl, CommandDTO
from field_billing.core.domain.events.events import CollectorAssignmentChangedEvent, DomainEvent
from field_billing.core.domain.services.event_dispatcher import EventDispatcher


@dataclass(frozen=True)
class PingCommand(CommandDTO):
    clients: int


@dataclass
class PingResult:
    events: list[DomainEvent] = field(default_factory=list)


class PingHandler:
    def handle(self, cmd: PingCommand) -> PingResult:
        return PingResult(
            events=[CollectorAssignmentChangedEvent(collector_id="c1", clients=cmd.clients, installments_updated=0, failed=0)]
        )


class CommandBusTests(TestCase):
    def setUp(self):
        self.dispatcher = EventDispatcher()
        self.bus = CommandBusImpl(self.dispatcher)
        self.bus.register(PingCommand, PingHandler())

    def test_eventos_do_resultado_sao_publicados(self):
        received = []
        self.dispatcher.subscribe(CollectorAssignmentChangedEvent, received.append)
        self.bus.dispatch(PingCommand(clients=2))
        self.assertEqual([e.clients for e in received], [2])

    def test_listener_com_erro_nao_impede_os_demais(self):
        received = []

        def broken(event):
            raise RuntimeError("falhou")

        self.dispatcher.subscribe(CollectorAssignmentChangedEvent, broken)
        self.dispatcher.subscribe(CollectorAssignmentChangedEvent, received.append)
        event = CollectorAssignmentChangedEvent(collector_id=None, clients=1, installments_updated=1, failed=0)

        self.assertEqual(self.dispatcher.dispatch(event), 1)
        self.assertEqual(received, [event])

    def test_unsubscribe(self):
        received = []
        self.dispatcher.subscribe(CollectorAssignmentChangedEvent, received.append)
        self.dispatcher.unsubscribe(CollectorAssignmentChangedEvent, received.append)
        self.bus.dispatch(PingCommand(clients=1))
        self.assertEqual(received, [])

    def test_comando_sem_handler(self):
        with self.assertRaises(ValueError):
            self.bus.dispatch(CommandDTO())
