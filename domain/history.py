from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from .models import Match


class MatchHistory:
    """
    The single list of recorded matches, keyed by match index.

    Accounts refer into this history by index. Adding a match whose index is
    already present is a no-op, so a game is never recorded twice.
    """

    def __init__(self, matches: Optional[Iterable[Match]] = None) -> None:
        self._by_index: Dict[int, Match] = {}
        for match in matches or ():
            self.add(match)

    def __len__(self) -> int:
        return len(self._by_index)

    def __iter__(self) -> Iterator[Match]:
        return iter(self.all())

    def __contains__(self, index: object) -> bool:
        return index in self._by_index

    def add(self, match: Match) -> bool:
        if match.index in self._by_index:
            return False
        self._by_index[match.index] = match
        return True

    def get(self, index: int) -> Optional[Match]:
        return self._by_index.get(index)

    def all(self) -> List[Match]:
        """Matches in index order."""
        return [self._by_index[i] for i in sorted(self._by_index)]

    def for_indices(self, indices: Iterable[int]) -> List[Match]:
        return [self._by_index[i] for i in indices if i in self._by_index]

    def clear(self) -> None:
        self._by_index.clear()
