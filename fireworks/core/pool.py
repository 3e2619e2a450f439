"""
Fireworks Pool
Ordered, capacity-bounded collection of active bursts.
"""
from typing import Iterable, Iterator, List

from .config import MAX_ACTIVE
from .entities import Firework


class FireworkPool:
    """Insertion-ordered list of Fireworks with an oldest-first eviction policy."""

    def __init__(self, max_active: int = MAX_ACTIVE):
        self.fireworks: List[Firework] = []
        self.max_active = max_active

    def __len__(self) -> int:
        return len(self.fireworks)

    def __iter__(self) -> Iterator[Firework]:
        return iter(self.fireworks)

    def __getitem__(self, index: int) -> Firework:
        return self.fireworks[index]

    @property
    def over_capacity(self) -> bool:
        return len(self.fireworks) > self.max_active

    def append(self, firework: Firework) -> None:
        self.fireworks.append(firework)

    def remove_at(self, index: int) -> Firework:
        """Remove exactly one entry; later entries shift down by one."""
        return self.fireworks.pop(index)

    def remove_indices(self, indices: Iterable[int]) -> List[Firework]:
        """Remove every marked index in a single compaction pass.

        Returns the removed entries in pool order. Survivors keep their
        relative order regardless of the order indices were marked in.
        """
        marked = set(indices)
        if not marked:
            return []
        if min(marked) < 0 or max(marked) >= len(self.fireworks):
            raise IndexError("pool index out of range")

        removed = []
        kept = []
        for i, firework in enumerate(self.fireworks):
            if i in marked:
                removed.append(firework)
            else:
                kept.append(firework)
        self.fireworks = kept
        return removed

    def evict_oldest(self) -> Firework:
        """Remove the entry that has been in the pool longest."""
        return self.remove_at(0)

    def clear(self) -> List[Firework]:
        """Remove every entry and return them."""
        removed = self.fireworks
        self.fireworks = []
        return removed

    @property
    def particle_count(self) -> int:
        """Total particles across all active bursts."""
        return sum(fw.particle_count for fw in self.fireworks)
