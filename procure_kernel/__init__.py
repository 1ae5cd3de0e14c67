"""
Procurement Kernel

Pure building blocks for indent (BOQ) review:
- Typed exceptions with machine-readable codes
- Structured JSON logging
- Immutable domain records for line items, vendor prices and purchase-order previews
- Workflow value types for review state machines
"""

__version__ = "0.1.0"
