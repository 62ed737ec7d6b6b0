"""HTTP layer: middleware, request parsing and route handlers."""
