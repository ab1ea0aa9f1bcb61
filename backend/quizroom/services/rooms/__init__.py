"""Room domain services: registry, transitions, scoring and timers.

This package contains the room logic that socket handlers and HTTP routes
call into, keeping transport concerns separated from the quiz mechanics.
"""
