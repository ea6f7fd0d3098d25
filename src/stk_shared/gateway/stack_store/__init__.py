"""Stack store gateway.

Persists the forest of tracked branches: which branch each one is stacked
on and the commit its base pointed at when it was last fixed.
"""
