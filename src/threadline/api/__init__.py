"""HTTP surface of the Threadline service."""
