"""
Endpoint tests for the task API.

Tests use the Flask test client and cover:
- Registration and login
- Task CRUD with ownership checks
- Listing with filters, sorting and pagination
- Input validation and authentication failures
"""
