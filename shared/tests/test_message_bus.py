from dataclasses import dataclass
import uuid

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class SomethingHappened(DomainEvent):
    value: int = 0


def make_event(value=1):
    return SomethingHappened(aggregate_id=uuid.uuid4(), value=value)


def test_handlers_receive_events():
    bus = MessageBus()
    seen = []
    bus.register_event_handler(SomethingHappened, lambda event: seen.append(event.value))

    bus.publish_events([make_event(1), make_event(2)])

    assert seen == [1, 2]


def test_registering_twice_is_ignored():
    bus = MessageBus()

    def handler(event):
        pass

    bus.register_event_handler(SomethingHappened, handler)
    bus.register_event_handler(SomethingHappened, handler)

    assert bus.handlers_for(SomethingHappened) == [handler]


def test_failing_handler_does_not_stop_others():
    bus = MessageBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    bus.register_event_handler(SomethingHappened, broken)
    bus.register_event_handler(SomethingHappened, lambda event: seen.append(event.value))

    bus.publish_events([make_event(7)])

    assert seen == [7]
