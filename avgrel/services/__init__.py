"""Application services for the release CLI."""
