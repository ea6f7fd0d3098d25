"""Git rebase operations sub-gateway."""
