# =============================================================================================
# APP/SERVICES/CURRENCY_SERVICE.PY - CURRENCIES AND THE EXCHANGE-RATE GRAPH
# =============================================================================================
# Owns the currency lifecycle and the directed rate graph stored in exchange_rates.
#
# GRAPH RULES:
# - A new currency starts with exactly one edge: itself → itself at rate 1
# - Rate edges come in pairs: setting A→B = r also sets B→A = 1/r,
#   removing A→B also removes B→A
# - Deleting a currency strips every edge that points at it from all other currencies
# - Conversion uses the direct edge only; no path-finding through a third currency
#
# TRANSACTIONS:
# Paired writes (forward + inverse edge, delete + fan-out cleanup) are issued as separate
# statements and committed together in the request's session transaction, so the graph
# is never left half-updated by a failure between the two writes.
# =============================================================================================

import math
from dataclasses import dataclass

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import (
    CurrencyAlreadyExists,
    CurrencyNotFound,
    ExchangeRateNotFound,
    ValidationFailure,
)
from app.models.currency import Currency, ExchangeRate

logger = structlog.get_logger(__name__)

SAME_CURRENCY_MESSAGE = "Source and target currencies must be different"


@dataclass(frozen=True)
class ConversionResult:
    base: str
    target: str
    amount: float
    converted_amount: float
    exchange_rate: float


class CurrencyService:
    """Currency CRUD, rate edges and conversions on top of one SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    # =========================================================================================
    # LOOKUPS
    # =========================================================================================

    def get_all_currencies(self) -> list[Currency]:
        """Every stored currency, ordered by symbol."""
        return self.db.query(Currency).order_by(Currency.symbol).all()

    def find_currency_by_symbol(self, symbol: str) -> Currency | None:
        return self.db.get(Currency, symbol)

    def validate_currency_exists(self, symbol: str) -> Currency:
        """Return the currency or raise CurrencyNotFound(symbol)."""
        currency = self.find_currency_by_symbol(symbol)
        if currency is None:
            raise CurrencyNotFound(symbol)
        return currency

    def _validate_pair(self, base: str, target: str) -> tuple[Currency, Currency]:
        # Base is checked first, so when both are missing the error names the base
        return self.validate_currency_exists(base), self.validate_currency_exists(target)

    # =========================================================================================
    # CURRENCY LIFECYCLE
    # =========================================================================================

    def create_currency(self, symbol: str, name: str) -> Currency:
        """
        Store a new currency seeded with its self edge (symbol → symbol = 1).

        Raises:
            CurrencyAlreadyExists: the symbol is taken (checked up front, and again by
                the primary key if a concurrent request wins the race)
        """
        if self.find_currency_by_symbol(symbol) is not None:
            raise CurrencyAlreadyExists(symbol)

        currency = Currency(symbol=symbol, name=name)
        currency.rate_edges[symbol] = ExchangeRate(target_symbol=symbol, rate=1.0)
        self.db.add(currency)

        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise CurrencyAlreadyExists(symbol) from exc

        self.db.refresh(currency)
        logger.info("currency_created", symbol=symbol)
        return currency

    def delete_currency(self, symbol: str) -> None:
        """
        Delete a currency and every edge that references it.

        Raises:
            CurrencyNotFound: nothing matched `symbol`
        """
        # STEP 1: delete the currency row itself
        deleted = (
            self.db.query(Currency)
            .filter(Currency.symbol == symbol)
            .delete(synchronize_session=False)
        )
        if deleted == 0:
            self.db.rollback()
            raise CurrencyNotFound(symbol)

        # STEP 2: fan-out cleanup of edges touching the symbol. With foreign keys
        # enforced the cascade has already removed them and this matches nothing.
        stripped = (
            self.db.query(ExchangeRate)
            .filter(
                (ExchangeRate.target_symbol == symbol) | (ExchangeRate.base_symbol == symbol)
            )
            .delete(synchronize_session=False)
        )
        self.db.commit()
        # Drop cached Currency instances so their rate_edges reload without the symbol
        self.db.expire_all()

        logger.info("currency_deleted", symbol=symbol, orphan_edges_removed=stripped)

    # =========================================================================================
    # RATE EDGES
    # =========================================================================================

    def _put_edge(self, base: Currency, target_symbol: str, rate: float) -> None:
        edge = base.rate_edges.get(target_symbol)
        if edge is None:
            base.rate_edges[target_symbol] = ExchangeRate(target_symbol=target_symbol, rate=rate)
        else:
            edge.rate = rate

    def set_exchange_rate(self, base: str, target: str, rate: float) -> None:
        """
        Set base → target = rate and target → base = 1 / rate.

        Raises:
            ValidationFailure: base == target, or rate is not a positive finite number
            CurrencyNotFound: base or target is not stored
        """
        if base == target:
            raise ValidationFailure(SAME_CURRENCY_MESSAGE)
        if not math.isfinite(rate) or rate <= 0:
            raise ValidationFailure("Exchange rate must be a positive number")
        # Subnormal rates pass the check above but their inverse overflows to inf
        inverse = 1 / rate
        if not math.isfinite(inverse):
            raise ValidationFailure("Exchange rate must be a positive number")

        base_currency, target_currency = self._validate_pair(base, target)

        self._put_edge(base_currency, target, rate)
        self._put_edge(target_currency, base, inverse)
        self.db.commit()

        logger.info("exchange_rate_set", base=base, target=target, rate=rate)

    def remove_exchange_rate(self, base: str, target: str) -> None:
        """
        Remove both base → target and target → base.

        Raises:
            ValidationFailure: base == target
            CurrencyNotFound: base or target is not stored
            ExchangeRateNotFound: base has no edge to target
        """
        if base == target:
            raise ValidationFailure(SAME_CURRENCY_MESSAGE)

        base_currency, target_currency = self._validate_pair(base, target)
        if target not in base_currency.rate_edges:
            raise ExchangeRateNotFound(base, target)

        # delete-orphan removes the rows when they leave the collection
        del base_currency.rate_edges[target]
        target_currency.rate_edges.pop(base, None)
        self.db.commit()

        logger.info("exchange_rate_removed", base=base, target=target)

    # =========================================================================================
    # CONVERSION
    # =========================================================================================

    def convert_currency(self, base: str, target: str, amount: float) -> ConversionResult:
        """
        Convert `amount` of `base` into `target` using the direct stored rate.

        Same-symbol conversions return the amount unchanged at rate 1 without touching
        the database, even for symbols that are not stored.

        Raises:
            CurrencyNotFound: base or target is not stored
            ExchangeRateNotFound: no direct base → target edge
        """
        if base == target:
            return ConversionResult(base, target, amount, amount, 1.0)

        base_currency, _ = self._validate_pair(base, target)
        edge = base_currency.rate_edges.get(target)
        if edge is None:
            raise ExchangeRateNotFound(base, target)

        return ConversionResult(
            base=base,
            target=target,
            amount=amount,
            converted_amount=amount * edge.rate,
            exchange_rate=edge.rate,
        )
