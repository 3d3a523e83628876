"""
Status message board: every account stores one message.

Shows payable methods, Optional returns, per-parameter docs and the binary
result serializer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Dict, Optional

import msgspec

from vm_bindgen import contract, payable, result_serializer, view
from vm_bindgen.runtime import env


@contract(tags=["status"])
@dataclass
class StatusMessage:
    records: Dict[str, str] = field(default_factory=dict)

    @payable
    def set_status(
        self,
        message: Annotated[str, msgspec.Meta(description="New status text.", max_length=280)],
    ) -> None:
        """Store a status message for the caller."""
        self.records[env.predecessor_account_id()] = message

    @view
    def get_status(self, account_id: str) -> Optional[str]:
        """Status message of `account_id`, if any."""
        return self.records.get(account_id)

    @view
    @result_serializer("binary")
    def count(self) -> int:
        return len(self.records)
