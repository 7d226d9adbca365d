# vending_admin/config/constants.py

# Singleton de informações do negócio
BUSINESS_INFO_ID = '00000000-0000-0000-0000-000000000001'

# Constantes para nomes e slugs
MACHINE_SLUG_LENGTH_MIN = 5
MACHINE_SLUG_LENGTH_MAX = 100
PRODUCT_SLUG_LENGTH_MIN = 2
PRODUCT_SLUG_LENGTH_MAX = 100
SLUG_PATTERN = r'^[a-z0-9-]+$'

# Limites de SEO
SEO_TITLE_LENGTH_MAX = 60
SEO_META_DESCRIPTION_LENGTH_MAX = 160
SEO_OG_DESCRIPTION_LENGTH_MAX = 200
KEYWORDS_MAX_ITEMS = 50

# Formulário público de contato
CONTACT_NAME_LENGTH_MAX = 50
CONTACT_COMPANY_LENGTH_MAX = 100
CONTACT_MESSAGE_LENGTH_MAX = 2000
PHONE_PATTERN = r'^\+?[\d\s\-\(\)\.]+$'

# Marketing
TEMPLATE_ID_PATTERN = r'^[a-z0-9_-]+$'
TEMPLATE_ID_LENGTH_MAX = 100
TEMPLATE_VARIABLES_MAX_ITEMS = 50
EXIT_INTENT_LIST_MAX_ITEMS = 10

# Limites de paginação por recurso
CONTACTS_LIMIT_DEFAULT, CONTACTS_LIMIT_MAX = 50, 100
MACHINES_LIMIT_DEFAULT, MACHINES_LIMIT_MAX = 50, 100
PRODUCTS_LIMIT_DEFAULT, PRODUCTS_LIMIT_MAX = 100, 200
SEO_LIMIT_DEFAULT, SEO_LIMIT_MAX = 50, 100
EMAIL_LOGS_LIMIT_DEFAULT, EMAIL_LOGS_LIMIT_MAX = 50, 100
ACTIVITY_LIMIT_DEFAULT, ACTIVITY_LIMIT_MAX = 10, 100
EMAIL_TEMPLATES_LIMIT_DEFAULT, EMAIL_TEMPLATES_LIMIT_MAX = 50, 100
EXIT_INTENT_LIMIT_DEFAULT, EXIT_INTENT_LIMIT_MAX = 50, 100

# Declaração da URL de Obtenção do Token
OAUTH2_SCHEME_TOKEN_URL = '/admin/auth/login'
