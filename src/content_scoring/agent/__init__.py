"""Scan orchestration agent."""
