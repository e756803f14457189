"""
Centralized test doubles and fixture data.

This package provides the product entity used across the test suite, its
seed data and a session adapter that runs library code against an
in-memory SQLite database.
"""
