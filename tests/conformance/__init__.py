"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of pool state projection.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - Value only leaves the pool as fees or burns
2. queue_consumption.py - Pending burns shrink by exactly the queued burns
3. idempotency.py - Read-only calls never change what they read
4. determinism.py - Reproducible behavior
5. bounds.py - Projection depth limited by the front-running window

These tests use hypothesis for property-based testing.
"""
