"""Batcave planner backend package."""
