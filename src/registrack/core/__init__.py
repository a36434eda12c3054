"""Core domain - pure logic with no I/O of its own."""
