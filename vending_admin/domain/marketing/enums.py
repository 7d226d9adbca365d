# caminho: vending_admin/domain/marketing/enums.py
# Funções:
# - TemplateCategory: público-alvo dos templates de e-mail
# - EXIT_INTENT_FALLBACK: conteúdo do popup quando nenhuma campanha está ativa

from __future__ import annotations

from typing import Any, Literal

TemplateCategory = Literal['customer', 'internal', 'marketing']

EXIT_INTENT_CTA_TEXT_DEFAULT = 'Get Your Free Machine'
EXIT_INTENT_CTA_LINK_DEFAULT = '/contact'
EXIT_INTENT_PHONE_TEXT_DEFAULT = 'Call (209) 403-5450'
EXIT_INTENT_PHONE_NUMBER_DEFAULT = '+12094035450'

EXIT_INTENT_FALLBACK: dict[str, Any] = {
    'headline': "Wait! Don't Miss Out...",
    'subheadline': 'Get a FREE Vending Machine!',
    'value_proposition': (
        'Join the many businesses in Modesto & Stanislaus County providing premium vending at zero cost!'
    ),
    'benefits': [
        '100% FREE Installation & Setup',
        'NO Upfront Costs or Contracts',
        '24/7 Service & Support',
        'Wide Product Selection',
    ],
    'stats': [
        {'value': '100% Free', 'label': 'Setup'},
        {'value': '24/7', 'label': 'Service'},
        {'value': '50+', 'label': 'Products'},
    ],
    'special_offer_badge': 'LIMITED TIME OFFER',
    'primary_cta_text': EXIT_INTENT_CTA_TEXT_DEFAULT,
    'primary_cta_link': EXIT_INTENT_CTA_LINK_DEFAULT,
    'phone_button_text': EXIT_INTENT_PHONE_TEXT_DEFAULT,
    'phone_number': EXIT_INTENT_PHONE_NUMBER_DEFAULT,
}
