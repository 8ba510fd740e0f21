"""Stepwise execution of a round-advancing action."""

from typing import Iterator

from core.game.snapshot import GameSnapshot


class Resolution:
    """
    Iterator over the snapshots produced by one player action.

    Each ``next()`` performs exactly one discrete state change on the game
    (a card dealt, the hole card revealed, a phase change, the settlement)
    and returns the snapshot taken right after it. The presentation layer
    decides how long to wait between steps; the engine refuses any other
    action until the resolution is exhausted.
    """

    def __init__(self, steps: Iterator[GameSnapshot]) -> None:
        self._steps = steps
        self._done = False
        self._last: GameSnapshot | None = None

    def __iter__(self) -> "Resolution":
        return self

    def __next__(self) -> GameSnapshot:
        if self._done:
            raise StopIteration
        try:
            snapshot = next(self._steps)
        except BaseException:
            # StopIteration or an engine error, either way nothing is left
            self._done = True
            raise
        self._last = snapshot
        return snapshot

    @property
    def done(self) -> bool:
        """Check if every step has been performed."""
        return self._done

    @property
    def last(self) -> GameSnapshot | None:
        """Most recent snapshot produced, if any."""
        return self._last

    def complete(self) -> GameSnapshot | None:
        """Run the remaining steps and return the final snapshot."""
        for _ in self:
            pass
        return self._last
