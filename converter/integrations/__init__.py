"""Quote provider integrations."""
