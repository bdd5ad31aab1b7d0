"""
Shared, cross-cutting code for the API.

`core/` should contain small building blocks that multiple features use
(settings, Supabase HTTP wiring, DB wiring). Keep feature-specific queries and
business logic in the corresponding feature package (e.g. `journal/`).
"""
