"""
Pytest fixtures for the procurement engine test suite.

Provides:
- A three-line sample indent (Cement, Steel, Sand) with vendor prices
- Logging reset between tests

Sample pricing:
    L1 Cement  qty 10   A 100+5=105   B 90+5=95 (lowest)   D 110+0=110
    L2 Steel   qty 100  A 50+9=59     C 55+0=55 (lowest)
    L3 Sand    qty 5    C 10+1 (inactive) -> no active vendors
"""

from decimal import Decimal

import pytest

from procure_kernel.domain.indent import Indent, LineItem, VendorPriceOption
from procure_kernel.logging_config import LogContext, reset_logging


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def cement() -> LineItem:
    return LineItem(id="L1", name="Cement", unit="bag", quantity=Decimal("10"))


@pytest.fixture
def steel() -> LineItem:
    return LineItem(id="L2", name="Steel", unit="kg", quantity=Decimal("100"))


@pytest.fixture
def sand() -> LineItem:
    return LineItem(id="L3", name="Sand", unit="cft", quantity=Decimal("5"))


@pytest.fixture
def sample_indent(cement, steel, sand) -> Indent:
    return Indent(id="IND-1", items=(cement, steel, sand), project="Tower A")


@pytest.fixture
def price_lookup() -> dict[str, tuple[VendorPriceOption, ...]]:
    return {
        "L1": (
            VendorPriceOption("A", Decimal("100"), Decimal("5")),
            VendorPriceOption("B", Decimal("90"), Decimal("5")),
            VendorPriceOption("D", Decimal("110"), Decimal("0")),
        ),
        "L2": (
            VendorPriceOption("A", Decimal("50"), Decimal("9")),
            VendorPriceOption("C", Decimal("55"), Decimal("0")),
        ),
        "L3": (
            VendorPriceOption("C", Decimal("10"), Decimal("1"), active=False),
        ),
    }
