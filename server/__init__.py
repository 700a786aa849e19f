"""Room server for Bisca."""
