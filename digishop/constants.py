# digishop/constants.py
# Conversation states
(
    REGISTER_NAME,
    REGISTER_EMAIL,
    REGISTER_PASSWORD,
    LOGIN_EMAIL,
    LOGIN_PASSWORD,
    EDIT_FULL_NAME,
    WAITING_PRODUCT_FORM,
    WAITING_CATEGORY_FORM,
) = range(8)

# user_data keys
CATALOG_FILTER = 'catalog_filter'
EDITING_PRODUCT_ID = 'editing_product_id'
PENDING_EMAIL = 'pending_email'
PENDING_FULL_NAME = 'pending_full_name'
