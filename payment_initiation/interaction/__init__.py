from payment_initiation.interaction.base import AuthorisationCodeSource, ScaRenderer
from payment_initiation.interaction.callback import CallbackCodeSource
from payment_initiation.interaction.console import ConsoleCodeSource

__all__ = ["AuthorisationCodeSource", "CallbackCodeSource", "ConsoleCodeSource", "ScaRenderer"]
