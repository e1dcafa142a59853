"""
Shared, cross-cutting code for the API.

`core/` should contain small building blocks that multiple features use
(DB wiring, settings, error kinds). Keep feature-specific SQL and business
logic in the corresponding feature package (e.g. `products/`).
"""
