"""modules/tool_usage: arithmetic tools and clients for the external collaborators."""
