"""HTTP boundary: webhook receivers, attribution capture, install and admin routes."""
