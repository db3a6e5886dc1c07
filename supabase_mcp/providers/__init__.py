"""Backend collaborators the tools delegate to."""

from supabase_mcp.providers.base import BackendProvider
from supabase_mcp.providers.management import ManagementClient

__all__ = ["BackendProvider", "ManagementClient"]
