"""Core: input mode state machine, ports and application state."""
