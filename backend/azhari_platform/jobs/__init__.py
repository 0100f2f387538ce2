"""Scheduled batch jobs."""
