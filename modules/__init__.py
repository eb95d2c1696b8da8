"""modules: tools, memory, recommendation, planning and learning layers."""
