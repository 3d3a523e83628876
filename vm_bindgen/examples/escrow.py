"""
Escrow example: cross-contract callbacks and fallible methods.

    lock(amount)                  payable, records a pending amount
    on_balances(total, ...)       private callback over all sub-call results
    on_transfer(receipt)          private callback, tolerates failure
    on_price(price, fee)          private callback with two single results
    release(amount)               fails with an error instead of panicking
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Annotated, List, Optional

from vm_bindgen import (Err, Ok, PromiseError, Result, U128, callback,
                        callback_result, callback_vec, contract, handle_result,
                        init, payable, private, serializer, view)
from vm_bindgen.runtime import env


class EscrowError(enum.Enum):
    INSUFFICIENT = "insufficient locked balance"
    ZERO = "amount must be positive"


@dataclass
class Receipt:
    receiver: str
    amount: int


@contract
@dataclass
class Escrow:
    locked: int = 0
    last_total: int = 0
    last_receipt: Optional[Receipt] = None
    failures: int = 0

    @init(ignore_state=True)
    @classmethod
    def reset(cls) -> Escrow:
        return cls()

    @payable
    def lock(self, amount: U128) -> U128:
        self.locked += int(amount) + env.attached_deposit()
        return U128(self.locked)

    @handle_result
    def release(self, amount: int) -> Result[int, EscrowError]:
        if amount <= 0:
            return Err(EscrowError.ZERO)
        if amount > self.locked:
            return Err(EscrowError.INSUFFICIENT)
        self.locked -= amount
        return Ok(self.locked)

    @private
    def on_balances(self, balances: Annotated[List[int], callback_vec]) -> int:
        self.last_total = sum(balances)
        return self.last_total

    @private
    def on_transfer(self, receipt: Annotated[Result[Receipt, PromiseError], callback_result]) -> bool:
        if isinstance(receipt, Ok):
            self.last_receipt = receipt.value
            return True
        self.failures += 1
        return False

    @private
    @serializer("binary")
    def on_price(
        self,
        price: Annotated[int, callback],
        fee: Annotated[int, callback(serializer="binary")],
        memo: str,
    ) -> int:
        env.log_str(f"on_price memo={memo}")
        return price + fee

    @view
    def get_locked(self) -> int:
        return self.locked
