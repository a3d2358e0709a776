"""
Unit tests for habit tracker components.

AWS services are mocked with moto, so no test needs network access.
"""
