"""Helpers wrapping the compiler, the chain SDK, the explorer API and unit math."""
