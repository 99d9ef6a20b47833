# Database models (User, RefreshToken, Currency, ExchangeRate)
# Import all models here so Base.metadata.create_all() can find them
from app.models.user import User
from app.models.token import RefreshToken
from app.models.currency import Currency, ExchangeRate

__all__ = ["User", "RefreshToken", "Currency", "ExchangeRate"]
