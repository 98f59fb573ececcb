# engagement/core/limiter.py
from slowapi import Limiter
from slowapi.util import get_remote_address

# Rate limiter (можно использовать Redis в продакшене)
limiter = Limiter(key_func=get_remote_address)
