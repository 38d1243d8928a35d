"""Console entrypoint, slash commands and the async input loop."""
