"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the token ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - Balances always sum to total supply, supply never grows
2. atomicity.py - Rejected operations change nothing
3. restriction.py - Transfer gating during and after the restriction period
4. allowance.py - Double-approval guard and delegated-spend bounds
5. concurrency.py - Concurrent callers cannot break the invariants

These tests use hypothesis for property-based testing.
"""
