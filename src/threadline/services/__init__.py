"""Business logic services for the Threadline application."""
