"""
Core application for the pathology lab backend.

This package contains models, role policy, services, serializers,
views and tests for the users, labs, test catalog and test orders.
"""
