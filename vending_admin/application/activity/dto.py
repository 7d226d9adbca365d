# caminho: vending_admin/application/activity/dto.py
# Funções:
# - ActivityOutput: entrada do log de atividades com o resumo legível

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ActivityOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    admin_user_id: Optional[str]
    action_type: str
    resource_type: str
    resource_id: Optional[str]
    old_values: Optional[dict[str, Any]]
    new_values: Optional[dict[str, Any]]
    ip_address: Optional[str]
    user_agent: Optional[str]
    created_at: datetime
    summary: str
