"""
Procurement configuration schema.

Defines the structure and defaults for indent review settings.  Values are
read from a YAML configuration set by ``procure_config.loader``.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Self


@dataclass(frozen=True)
class ProcurementConfig:
    """
    Configuration for indent comparison, review and receiving.

    Field defaults match how the procurement team works today.  Override
    through the YAML configuration set:

        currency: INR
        carry_over_purchaser_reason: true
        require_invoice_number: true
    """

    # Single currency for every amount on an indent
    currency: str = "INR"

    # Admin review: keeping the purchaser's justified non-lowest vendor
    # needs no new reason
    carry_over_purchaser_reason: bool = True

    # Receiving: every delivery must carry at least one invoice number
    require_invoice_number: bool = True

    def __post_init__(self) -> None:
        code = (self.currency or "").strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError(f"currency must be a three-letter code, got {self.currency!r}")
        object.__setattr__(self, "currency", code)

    @classmethod
    def with_defaults(cls) -> Self:
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from a parsed mapping; unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown procurement config keys: {', '.join(unknown)}")
        for name in ("carry_over_purchaser_reason", "require_invoice_number"):
            if name in data and not isinstance(data[name], bool):
                raise ValueError(f"{name} must be true or false, got {data[name]!r}")
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
