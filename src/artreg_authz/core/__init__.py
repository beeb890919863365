"""Core exceptions and value objects for artreg-authz."""
