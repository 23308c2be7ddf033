from santa.services.assignment import (
    Assignment,
    AssignmentError,
    InvalidInput,
    NoSolution,
    Participant,
    solve,
    validate,
)
from santa.services.draw import DrawError

__all__ = [
    "Assignment",
    "AssignmentError",
    "InvalidInput",
    "NoSolution",
    "Participant",
    "solve",
    "validate",
    "DrawError",
]
