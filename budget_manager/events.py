from typing import Callable, Dict, List, NamedTuple
from datetime import datetime

__all__ = [
    'Event', 'EventBus', 'Handler',
    'BUDGET_CHANGED', 'CATEGORY_ADDED', 'TRANSACTION_ADDED', 'FUNDS_TRANSFERRED',
]


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], object]


class EventBus:
    """Synchronous publish/subscribe channel from the engine to its views.

    Handlers run in subscription order on the publisher's call stack; a
    handler that raises propagates to the publisher.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        if name not in self._subscribers:
            self._subscribers[name] = []
        self._subscribers[name].append(handler)

    def publish(self, name: str, payload: dict) -> List[object]:
        if name not in self._subscribers:
            return []

        event = Event(
            name=name,
            ts=datetime.now().isoformat(),
            payload=payload
        )

        results = []
        for handler in list(self._subscribers[name]):
            results.append(handler(event, payload))
        return results

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if name in self._subscribers:
            if handler in self._subscribers[name]:
                self._subscribers[name].remove(handler)


# A budget was created or selected; views should reload everything.
BUDGET_CHANGED = "BUDGET_CHANGED"
CATEGORY_ADDED = "CATEGORY_ADDED"
TRANSACTION_ADDED = "TRANSACTION_ADDED"
FUNDS_TRANSFERRED = "FUNDS_TRANSFERRED"
