from __future__ import annotations

from agency_toolkit.clients.edit_session import CustomerEditSession
from agency_toolkit.clients.toolkit_client import ToolkitClient

__all__ = ["CustomerEditSession", "ToolkitClient"]
