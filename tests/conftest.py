from typing import Callable, Dict, List

import pytest


class FakeBuffer:
    """Stands in for an encoded image whose size is too large to allocate."""

    def __init__(self, size: int) -> None:
        self.size = size

    def __len__(self) -> int:
        return self.size


class RecordingRenderer:
    """Fake renderer: records every call and returns a buffer sized by `size_fn`."""

    def __init__(self, size_fn: Callable[[Dict], int], sized: bool = False) -> None:
        self.size_fn = size_fn
        self.sized = sized
        self.calls: List[Dict] = []

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        size = int(self.size_fn(kwargs))
        if self.sized:
            return FakeBuffer(size)
        return bytes(size)

    @property
    def dimensions(self):
        return [(c["width"], c["height"]) for c in self.calls]

    @property
    def qualities(self):
        return [c["quality"] for c in self.calls]


@pytest.fixture
def renderer_factory():
    return RecordingRenderer


@pytest.fixture
def fixed_renderer():
    def make(size: int) -> RecordingRenderer:
        return RecordingRenderer(lambda _: size)
    return make
