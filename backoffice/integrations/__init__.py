"""Integrations with external systems (remote store, error tracking)."""

from backoffice.integrations.remote_store import RemoteStore, SupabaseRestStore, upsert_remote

__all__ = [
    "RemoteStore",
    "SupabaseRestStore",
    "upsert_remote",
]
