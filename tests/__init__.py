"""
Test package for the habit tracker.

Test Organization:
    unit/: Unit tests for models, stores, services and the Lambda handler
    conftest.py: Pytest configuration, mocked AWS resources and shared fixtures
"""
