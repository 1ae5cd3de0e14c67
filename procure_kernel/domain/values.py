"""
Values -- Decimal coercion for amounts and quantities.

Responsibility:
    Single place where raw inputs (from JSON payloads, YAML, forms) become
    ``Decimal``. Every domain record funnels its numeric fields through
    ``to_decimal`` in ``__post_init__``.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Decimal-only arithmetic: floats are rejected, never silently converted.
      Callers parsing JSON should use ``json.loads(..., parse_float=Decimal)``.
    - Amounts are finite: NaN and Infinity are rejected.

Failure modes:
    - InvalidAmountError for float, bool, non-numeric strings and
      non-finite values.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from procure_kernel.exceptions import InvalidAmountError

ZERO = Decimal("0")


def to_decimal(value: Decimal | int | str, field_name: str) -> Decimal:
    """
    Convert ``value`` to a finite Decimal.

    Preconditions:
        value is a Decimal, an int or a numeric string.

    Postconditions:
        Returns a finite Decimal equal to ``value``.

    Raises:
        InvalidAmountError: on float, bool, unparseable or non-finite input.
    """
    # bool is an int subclass; True is not a quantity
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmountError(field_name, value, "floats and booleans are not accepted")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise InvalidAmountError(field_name, value, "not a number") from e
    else:
        raise InvalidAmountError(field_name, value, f"unsupported type {type(value).__name__}")

    if not result.is_finite():
        raise InvalidAmountError(field_name, value, "must be finite")
    return result
