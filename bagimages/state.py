from typing import Dict, Iterator, List, Optional

from bagimages.naming import to_resource_name


class TopicState:
    # Number of messages observed on this connection since tracking began
    counter: int = 0
    # Number of frames successfully saved
    extracted: int = 0
    name: str = ""
    resource_name: str = ""
    done: bool = False

    def __init__(self, name: str, resource_name: Optional[str] = None):
        self.name = name
        self.resource_name = resource_name if resource_name is not None else to_resource_name(name)
        self.counter = 0
        self.extracted = 0
        self.done = False

    def mark_done(self):
        self.done = True

    def __repr__(self) -> str:
        return f"TopicState(name={self.name}, resource_name={self.resource_name}, counter={self.counter}, extracted={self.extracted}, done={self.done})"


# Export state of every tracked connection, keyed by connection id and iterated in id order.
# Owned by a single ExtractionEngine, entries are never removed during a run.
class ExportStateStore:
    def __init__(self):
        self._states: Dict[int, TopicState] = {}

    def track(self, conn_id: int, topic: str) -> TopicState:
        if conn_id in self._states:
            return self._states[conn_id]

        # Several connections can share a topic, keep their output files apart
        resource_name = to_resource_name(topic)
        if any(s.resource_name == resource_name for s in self._states.values()):
            resource_name = f"{resource_name}_c{conn_id}"

        state = TopicState(topic, resource_name)
        self._states[conn_id] = state
        return state

    def get(self, conn_id: int) -> Optional[TopicState]:
        return self._states.get(conn_id)

    def __contains__(self, conn_id: int) -> bool:
        return conn_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._states))

    def items(self) -> Iterator:
        for conn_id in self:
            yield conn_id, self._states[conn_id]

    def values(self) -> List[TopicState]:
        return [state for _, state in self.items()]

    def all_done(self) -> bool:
        return all(state.done for state in self._states.values())

    # Topics of connections on which at least one message was observed
    def found_topics(self) -> List[str]:
        return [state.name for state in self.values() if state.counter > 0]
