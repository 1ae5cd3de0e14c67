"""
Procurement modules.

Thin, stateful orchestration on top of the pure ``procure_engines``:
the admin review of a submitted indent and the purchase orders that an
approved indent produces.
"""
