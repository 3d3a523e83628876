"""
Counter example contract.

Public methods:

    new(start: int) -> Counter        (init)
    get() -> int                      (view)
    increment(by: int = 1) -> int
    reset() -> None
    describe() -> str                 (static view)
"""

from __future__ import annotations

from dataclasses import dataclass

from vm_bindgen import contract, init, property_attr, view
from vm_bindgen.runtime import env


@contract(tags=["counter"])
@dataclass
class Counter:
    value: int = 0
    owner: str = ""

    @init
    @staticmethod
    def new(start: int) -> Counter:
        """Create a counter starting at `start`, owned by the signer."""
        return Counter(value=start, owner=env.signer_account_id())

    @view
    def get(self) -> int:
        """Return the current counter value."""
        return self.value

    @property_attr("category", "arithmetic")
    def increment(self, by: int = 1) -> int:
        """Add `by` to the counter and return the new value."""
        if by < 0:
            raise ValueError("counter: increment must be non-negative")
        self.value += by
        env.log_str(f"Counter.Incremented by={by}")
        return self.value

    def reset(self) -> None:
        if env.predecessor_account_id() != self.owner:
            env.panic_str("counter: only the owner can reset")
        self.value = 0

    @staticmethod
    def describe() -> str:
        return "counter v1"
