"""
BP Diagnostic Back-Office Client - Source Package

A typed client for the diagnostic laboratory back-office API:
dashboards, patient records, inventory, lab queue, reporting
and cash reconciliation.

DESIGN PRINCIPLES:
1. The server owns the data - the client never re-computes what it reports
2. Every payload is validated at the API boundary
3. Reject bad input before it reaches the network
4. The session token is an explicit, injected object
5. Failures degrade to a message, never to a crash
"""

__version__ = "1.0.0"
__author__ = "BP Diagnostic Team"
