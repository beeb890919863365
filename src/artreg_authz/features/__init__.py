"""Feature modules for artreg-authz."""
