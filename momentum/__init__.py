"""Momentum: goal roadmaps, daily schedules and day reviews."""
