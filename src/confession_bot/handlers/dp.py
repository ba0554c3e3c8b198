from aiogram import Dispatcher

from .middlewares import SettingsMiddleware

dp = Dispatcher()

# Settings are read once per update and passed to handlers as arguments
dp.update.outer_middleware(SettingsMiddleware())
