"""동기식 in-process 이벤트 디스패처.

- 이벤트 종류(StoreEvent)별로 리스너를 priority 내림차순으로 실행한다.
  priority 가 같으면 먼저 등록된 리스너가 먼저 실행된다.
- 리스너 안에서 dispatch 를 다시 호출하면 중첩 이벤트의 리스너가 모두 끝난 뒤에
  바깥 리스너로 돌아온다 (큐잉하지 않는다).
- 리스너가 stop_propagation() 을 호출하면 같은 이벤트의 남은 리스너는 건너뛴다.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol, TypeVar

from .events import EVENT_TYPES, DispatchedEvent, StoreEvent


logger = logging.getLogger(__name__)


Listener = Callable[[Any], None]
E = TypeVar("E", bound=DispatchedEvent)


class EventSubscriber(Protocol):
    """subscribed_events() 로 (메서드 이름, priority) 목록을 선언하는 리스너 묶음."""

    @classmethod
    def subscribed_events(
        cls,
    ) -> Mapping[StoreEvent, list[tuple[str, int]]]:  # pragma: no cover - Protocol
        ...


@dataclass(frozen=True, slots=True)
class _Registration:
    priority: int
    sequence: int
    listener: Listener


class EventDispatcher:
    def __init__(self) -> None:
        self._registrations: dict[StoreEvent, list[_Registration]] = {}
        self._sequence = itertools.count()

    def add_listener(
        self, kind: StoreEvent, listener: Listener, priority: int = 0
    ) -> None:
        registration = _Registration(
            priority=priority, sequence=next(self._sequence), listener=listener
        )
        registrations = self._registrations.setdefault(kind, [])
        registrations.append(registration)
        registrations.sort(key=lambda r: (-r.priority, r.sequence))

    def add_subscriber(self, subscriber: EventSubscriber) -> None:
        for kind, entries in subscriber.subscribed_events().items():
            for method_name, priority in entries:
                self.add_listener(kind, getattr(subscriber, method_name), priority)

    def get_listeners(self, kind: StoreEvent) -> list[Listener]:
        return [r.listener for r in self._registrations.get(kind, [])]

    def dispatch(self, kind: StoreEvent, event: E) -> E:
        """kind 의 리스너를 순서대로 실행하고 같은 event 객체를 돌려준다.

        리스너가 던진 예외는 그대로 호출자에게 전파된다.
        """
        expected = EVENT_TYPES[kind]
        if not isinstance(event, expected):
            raise TypeError(
                f"{kind.value} expects {expected.__name__}, got {type(event).__name__}"
            )

        for listener in self.get_listeners(kind):
            if event.propagation_stopped:
                logger.debug("propagation stopped for event kind=%s", kind.value)
                break
            listener(event)

        return event
