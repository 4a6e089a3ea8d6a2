from slowapi import Limiter
from slowapi.util import get_remote_address
from ..config import settings

# один экземпляр на приложение: лимиты регистрируются при импорте роутеров
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
)
