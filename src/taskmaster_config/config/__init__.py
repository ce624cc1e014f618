"""Static configuration for taskmaster-config: paths, messages, settings and the schema table."""
