# caminho: vending_admin/domain/admins/enums.py
# Funções:
# - Define os value objects de papéis de administrador e tipos de ação de auditoria.

from __future__ import annotations

from typing import Literal


# ─────────────────────────────────────────────────────────────────────────────
# Papéis de administrador
# Ordem de privilégio: editor < admin < super_admin.
# As permissões efetivas de cada papel ficam em roles.py.
# ─────────────────────────────────────────────────────────────────────────────
ADMIN_ROLE_DEFAULT: str = 'editor'
ADMIN_ROLE_SUPERUSER: str = 'super_admin'


# ─────────────────────────────────────────────────────────────────────────────
# Ações registradas no log de atividades
# ─────────────────────────────────────────────────────────────────────────────
ActionType = Literal['create', 'update', 'delete', 'login', 'logout']

ACTION_LABELS: dict[str, str] = {
    'create': 'Created',
    'update': 'Updated',
    'delete': 'Deleted',
    'login': 'Logged in',
    'logout': 'Logged out',
}

RESOURCE_LABELS: dict[str, str] = {
    'vending_machine': 'vending machine',
    'machine_image': 'machine image',
    'product': 'product',
    'contact_submission': 'contact',
    'business_info': 'business info',
    'seo_setting': 'SEO settings',
    'admin_user': 'admin user',
    'email': 'email',
    'email_template': 'email template',
    'exit_intent_campaign': 'exit intent campaign',
}


def describe_activity(action_type: str, resource_type: str, resource_id: str | None) -> str:
    """Gera o resumo legível de uma entrada de auditoria (ex.: 'Updated contact #1a2b3c4d')."""
    action = ACTION_LABELS.get(action_type, action_type.replace('_', ' ').capitalize())
    if action_type in {'login', 'logout'}:
        return action
    resource = RESOURCE_LABELS.get(resource_type, resource_type.replace('_', ' '))
    if resource_id:
        return f'{action} {resource} #{str(resource_id)[:8]}'
    return f'{action} {resource}'
