"""Git commit operations sub-gateway."""
