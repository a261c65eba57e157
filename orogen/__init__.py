"""In-memory slashing, treasury and Yuma consensus state machines with dispatch weight estimates."""

__version__ = "0.1.0"