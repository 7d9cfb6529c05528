"""
Test suite for Policy Desk.

Run all tests: pytest
Run with coverage: pytest --cov=. --cov-report=html
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_bulk_upload_service.py -v
"""
