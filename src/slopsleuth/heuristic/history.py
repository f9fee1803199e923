"""Per-identity fingerprint memory for near-duplicate detection."""

from __future__ import annotations

from collections import OrderedDict


class FingerprintMemo(OrderedDict[str, int]):
    """Fingerprint -> occurrence count, evicting the least recently written."""

    def __init__(self, max_size: int) -> None:
        super().__init__()
        self.max_size = max_size

    def __setitem__(self, key: str, value: int) -> None:
        super().__setitem__(key, value)
        self.move_to_end(key)
        while len(self) > self.max_size:
            self.popitem(last=False)


class IdentityHistory:
    """Bounded map of identity -> FingerprintMemo.

    Both levels are LRU: at most ``max_identities`` authors are remembered,
    each with at most ``max_fingerprints`` distinct messages.
    """

    def __init__(self, *, max_identities: int = 5000, max_fingerprints: int = 200) -> None:
        if max_identities < 1 or max_fingerprints < 1:
            raise ValueError("history bounds must be positive")
        self.max_identities = max_identities
        self.max_fingerprints = max_fingerprints
        self._memos: OrderedDict[str, FingerprintMemo] = OrderedDict()

    def for_identity(self, identity: str) -> FingerprintMemo:
        """Return (creating if needed) the memo for one author."""
        memo = self._memos.get(identity)
        if memo is None:
            memo = FingerprintMemo(self.max_fingerprints)
            self._memos[identity] = memo
        self._memos.move_to_end(identity)
        while len(self._memos) > self.max_identities:
            self._memos.popitem(last=False)
        return memo

    def __contains__(self, identity: object) -> bool:
        return identity in self._memos

    def __len__(self) -> int:
        return len(self._memos)
