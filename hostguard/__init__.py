"""Instance-aware record naming and cross-host reference validation."""
