import pytest


class ScriptedRandom:
    """Stands in for ``random.Random``: ``randrange`` returns queued values."""

    def __init__(self, values):
        self.values = list(values)

    def randrange(self, stop):
        assert self.values, "scripted rng ran out of values"
        value = self.values.pop(0)
        assert 0 <= value < stop, f"scripted value {value} outside range({stop})"
        return value

    @property
    def remaining(self):
        return len(self.values)


@pytest.fixture
def scripted():
    return ScriptedRandom
