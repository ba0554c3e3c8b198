# Importing the modules registers their handlers with the dispatcher
from .callback_handlers import handle_callback
from .dp import dp
from .message_handlers import handle_private_message

__all__ = ["dp", "handle_callback", "handle_private_message"]
