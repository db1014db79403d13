"""Outbound call resilience.

Contains the shared rate gate, the exponential backoff retry policy and
the executor that composes them around every provider call.
Bounded Context: API Resilience
"""
