"""
Test suite for the task API.

This package contains:
- unit/: credential, token, identity, validation and query-engine tests
- integration/: endpoint tests through the Flask test client
- security/: injection, mass-assignment and forged-token tests
"""
