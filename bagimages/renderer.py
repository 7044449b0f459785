from typing import Dict

from tqdm import tqdm

from bagimages.state import ExportStateStore, TopicState


def describe(state: TopicState) -> str:
    if state.extracted == 0:
        return f"Found topic {state.name}"
    else:
        return f"Extracted {state.extracted} frames from topic {state.name}"


# Shows one progress bar per tracked topic. Only reads the store, so leaving it out never changes the export.
class ProgressRenderer:
    def __init__(self, disable: bool = False):
        self.disable = disable
        self.bars: Dict[int, tqdm] = {}

    def __call__(self, store: ExportStateStore):
        for conn_id, state in store.items():
            bar = self.bars.get(conn_id)

            if bar is None:
                bar = tqdm(desc=describe(state), unit="frames", position=len(self.bars), leave=True, disable=self.disable)
                self.bars[conn_id] = bar

            if bar.n != state.extracted:
                bar.n = state.extracted
                bar.set_description(describe(state))

    def close(self):
        for bar in self.bars.values():
            bar.close()
