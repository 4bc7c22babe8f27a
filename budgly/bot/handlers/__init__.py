from .states import (
    ASKING_AMOUNT,
    ASKING_CATEGORY,
    ASKING_CONFIRMATION,
    ASKING_DESCRIPTION,
    ASKING_TYPE,
)
from .handle_add_transaction import (
    handle_amount,
    handle_category,
    handle_description,
    handle_type,
    start_add_transaction,
)
from .handle_confirmation import cancel_add_transaction, handle_confirmation
