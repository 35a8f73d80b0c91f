"""Process exit codes shared by CLI commands."""

SUCCESS_EXIT_CODE = 0
VALIDATION_EXIT_CODE = 10
FATAL_EXIT_CODE = 20
CANCELLED_EXIT_CODE = 30

__all__ = [
    "CANCELLED_EXIT_CODE",
    "FATAL_EXIT_CODE",
    "SUCCESS_EXIT_CODE",
    "VALIDATION_EXIT_CODE",
]
