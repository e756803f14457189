"""Pydantic schemas for query descriptors, results and error envelopes."""
