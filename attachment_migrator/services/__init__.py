"""Service integrations for Supabase communication."""

__all__ = [
    "supabase_adapter",
]
