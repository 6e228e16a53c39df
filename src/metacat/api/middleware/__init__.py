"""API middleware package: request IDs, timing and error mapping."""
