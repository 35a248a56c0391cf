"""Test Planner - Services initialization."""
