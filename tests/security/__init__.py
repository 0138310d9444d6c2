"""
Security tests for the task API.

Covers injection payloads, mass assignment, and forged or replayed
bearer tokens at the HTTP boundary.
"""
