"""Shared constants for ideaplan."""

import re

# Idea ID validation
IDEA_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')
MAX_IDEA_ID_LEN = 100

# Store kinds (one directory / namespace each)
KIND_CLARIFICATION = "clarification_sessions"
KIND_BREAKDOWN = "breakdown_sessions"

# CLI exit codes
EXIT_OK = 0
EXIT_GENERATION_ERROR = 1
EXIT_INVALID = 2
EXIT_CONFLICT = 3
