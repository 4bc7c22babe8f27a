from .register_transaction import register_transaction
from .send_confirmation_message import CONFIRM_KEYBOARD, send_confirmation_message
