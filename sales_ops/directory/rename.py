# sales_ops/directory/rename.py
"""
Agent Rename Flow

- Blank names are rejected before any gateway call
- Only one rename may be in flight per session (saving flag in the store)
- Permission failures (row-level security) get their own message
- A success drops kept list pages and leaves a flash message for the
  next rerun
"""

import logging
from dataclasses import dataclass
from typing import MutableMapping, Optional

from sales_ops.gateway import GatewayError, SalesGateway
from .view_state import drop_kept_pages

logger = logging.getLogger(__name__)

MSG_PERMISSION_DENIED = "Permission denied. You do not have permission to update this agent."
MSG_UPDATE_FAILED = "Failed to update agent. Please try again."
MSG_INVALID_NAME = "Please enter a valid name"
MSG_IN_PROGRESS = "An update is already in progress. Please wait."
MSG_UPDATED = "Agent name updated successfully"

SAVING_KEY = 'agent_rename_saving'
FLASH_KEY = 'agent_rename_flash'


@dataclass
class RenameResult:
    success: bool
    message: str
    new_name: Optional[str] = None


def classify_update_error(error: Exception) -> str:
    """Map a gateway failure to the message shown to the user."""
    text = str(error).lower()
    if 'permission' in text or 'policy' in text:
        return MSG_PERMISSION_DENIED
    return MSG_UPDATE_FAILED


class AgentRenameController:
    """
    Validates and submits agent renames.

    Usage:
        controller = AgentRenameController(gateway, st.session_state)
        result = controller.rename(agent_id, new_name)
        if result.success:
            st.cache_data.clear()
            st.rerun()

        # next run
        flash = controller.pop_flash()
    """

    def __init__(self, gateway: SalesGateway, store: MutableMapping):
        self.gateway = gateway
        self.store = store

    @property
    def is_saving(self) -> bool:
        return bool(self.store.get(SAVING_KEY, False))

    def pop_flash(self) -> Optional[str]:
        return self.store.pop(FLASH_KEY, None)

    def rename(self, agent_id, new_name: Optional[str]) -> RenameResult:
        name = (new_name or '').strip()
        if not name:
            return RenameResult(False, MSG_INVALID_NAME)

        if self.is_saving:
            logger.warning(f"Rename of agent {agent_id} ignored, another update in progress")
            return RenameResult(False, MSG_IN_PROGRESS)

        self.store[SAVING_KEY] = True
        try:
            self.gateway.update_agent_name(agent_id, name)
        except GatewayError as e:
            logger.error(f"Rename of agent {agent_id} failed: {e}")
            return RenameResult(False, classify_update_error(e))
        finally:
            self.store[SAVING_KEY] = False

        drop_kept_pages(self.store)
        self.store[FLASH_KEY] = MSG_UPDATED
        return RenameResult(True, MSG_UPDATED, new_name=name)


__all__ = [
    'AgentRenameController',
    'RenameResult',
    'classify_update_error',
    'MSG_PERMISSION_DENIED',
    'MSG_UPDATE_FAILED',
    'MSG_INVALID_NAME',
    'MSG_IN_PROGRESS',
]
