# caminho: vending_admin/domain/catalog/enums.py
# Funções:
# - Categorias de máquinas e produtos, status de contatos e de e-mails enviados

from __future__ import annotations

from typing import Literal

MachineCategory = Literal['refrigerated', 'non-refrigerated']

ProductCategory = Literal['chips', 'candy', 'protein', 'pastries', 'nuts', 'snacks', 'beverages', 'energy', 'healthy']

# Fluxo de atendimento: new -> in_progress -> resolved (archived encerra sem resolução)
ContactStatus = Literal['new', 'in_progress', 'resolved', 'archived']
CONTACT_STATUS_DEFAULT: str = 'new'
CONTACT_STATUS_RESOLVED: str = 'resolved'

EmailStatus = Literal['sent', 'failed']

BoolFlag = Literal['true', 'false']
