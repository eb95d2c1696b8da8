"""schemas: record types shared by every layer."""
