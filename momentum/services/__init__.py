"""Goal, schedule, task and review services."""
