"""Gateways and shared types for stk."""
