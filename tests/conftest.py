from types import SimpleNamespace

import pytest

from starry_string.hand_tracking import HandLandmark


def _hand(anchor, plucker, n_landmarks=21):
    """21 normalised landmarks with the anchor / plucker tips placed."""
    landmarks = [SimpleNamespace(x=0.5, y=0.5, z=0.0) for _ in range(n_landmarks)]
    landmarks[HandLandmark.INDEX_FINGER_TIP] = SimpleNamespace(
        x=anchor[0], y=anchor[1], z=0.0,
    )
    landmarks[HandLandmark.MIDDLE_FINGER_TIP] = SimpleNamespace(
        x=plucker[0], y=plucker[1], z=0.0,
    )
    return landmarks


@pytest.fixture
def make_hand():
    """``make_hand(anchor=(x, y), plucker=(x, y))`` in normalised coords."""
    return _hand


class FakeStream:
    """Stands in for ``sounddevice.OutputStream``."""

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.active = False
        self.closed = False

    def start(self):
        self.active = True

    def stop(self):
        self.active = False

    def close(self):
        self.closed = True


@pytest.fixture
def stream_factory():
    """Factory that records every stream it creates in ``.created``."""
    created = []

    def factory(**kwargs):
        stream = FakeStream(**kwargs)
        created.append(stream)
        return stream

    factory.created = created
    return factory
