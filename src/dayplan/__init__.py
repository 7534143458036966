"""dayplan - daily activity planner with a sleep-aware calendar and focus timer."""
