"""Bearer-token authentication: users, tokens, and the per-request security context."""
