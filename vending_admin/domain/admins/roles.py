# caminho: vending_admin/domain/admins/roles.py
# Funções:
# - Capability: permissões declaradas por cada endpoint administrativo
# - ROLE_CAPABILITIES: conjunto de permissões por papel
# - has_capability(): verifica se o papel concede a permissão

from __future__ import annotations

from enum import Enum

from vending_admin.domain.admins.enums import ADMIN_ROLE_SUPERUSER


class Capability(str, Enum):
    CONTACTS_READ = 'contacts:read'
    CONTACTS_WRITE = 'contacts:write'
    MACHINES_READ = 'machines:read'
    MACHINES_WRITE = 'machines:write'
    MACHINES_DELETE = 'machines:delete'
    PRODUCTS_READ = 'products:read'
    PRODUCTS_WRITE = 'products:write'
    PRODUCTS_DELETE = 'products:delete'
    SEO_READ = 'seo:read'
    SEO_WRITE = 'seo:write'
    BUSINESS_READ = 'business:read'
    BUSINESS_WRITE = 'business:write'
    EMAILS_READ = 'emails:read'
    EMAILS_SEND = 'emails:send'
    MARKETING_READ = 'marketing:read'
    MARKETING_WRITE = 'marketing:write'
    MARKETING_DELETE = 'marketing:delete'
    ACTIVITY_READ = 'activity:read'
    ADMINS_MANAGE = 'admins:manage'


_READ_ONLY = frozenset(
    {
        Capability.CONTACTS_READ,
        Capability.MACHINES_READ,
        Capability.PRODUCTS_READ,
        Capability.SEO_READ,
        Capability.BUSINESS_READ,
        Capability.EMAILS_READ,
        Capability.MARKETING_READ,
        Capability.ACTIVITY_READ,
    }
)

ROLE_CAPABILITIES: dict[str, frozenset[Capability]] = {
    ADMIN_ROLE_SUPERUSER: frozenset(Capability),
    'admin': frozenset(Capability) - {Capability.ADMINS_MANAGE},
    'editor': _READ_ONLY
    | {
        Capability.MACHINES_WRITE,
        Capability.PRODUCTS_WRITE,
        Capability.SEO_WRITE,
        Capability.MARKETING_WRITE,
    },
}


def has_capability(role: str, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get((role or '').lower(), frozenset())
