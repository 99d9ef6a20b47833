# =============================================================================================
# APP/MODELS/CURRENCY.PY - CURRENCY AND EXCHANGE RATE DATABASE MODELS
# =============================================================================================
# A currency owns a set of directed exchange-rate edges:
#
#     USD ──0.9──▶ EUR        (row: base_symbol=USD, target_symbol=EUR, rate=0.9)
#     EUR ──1.111─▶ USD       (row: base_symbol=EUR, target_symbol=USD, rate=1/0.9)
#     USD ──1────▶ USD        (self edge, written when the currency is created)
#
# Each edge is one row in exchange_rates. Currency.rates exposes the outgoing edges as
# a plain {target_symbol: rate} dict, which is what API responses show.
#
# INVARIANTS (maintained by CurrencyService, not by the database):
# - Every edge A→B (A ≠ B) has its inverse B→A with rate 1/r
# - Deleting a currency leaves no edge pointing at its symbol
#
# Both foreign keys cascade on delete, so the database also removes dangling edges when
# the engine enforces foreign keys.
# =============================================================================================

from sqlalchemy import Column, Integer, String, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship, attribute_keyed_dict

from app.core.db import Base


class Currency(Base):
    """
    DATABASE TABLE:
        CREATE TABLE currencies (
            symbol VARCHAR(16) PRIMARY KEY,
            name VARCHAR(100) NOT NULL
        );
    """

    __tablename__ = "currencies"

    symbol: str = Column(String(16), primary_key=True)
    name: str = Column(String(100), nullable=False)

    # Outgoing edges keyed by target symbol: currency.rate_edges["EUR"].rate
    rate_edges = relationship(
        "ExchangeRate",
        foreign_keys="ExchangeRate.base_symbol",
        back_populates="base",
        collection_class=attribute_keyed_dict("target_symbol"),
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    @property
    def rates(self) -> dict[str, float]:
        """Outgoing edges as {target_symbol: rate}."""
        return {target: edge.rate for target, edge in self.rate_edges.items()}

    def __repr__(self) -> str:
        return f"<Currency(symbol={self.symbol}, name={self.name})>"


class ExchangeRate(Base):
    """
    One directed edge of the rate graph.

    DATABASE TABLE:
        CREATE TABLE exchange_rates (
            id INTEGER PRIMARY KEY,
            base_symbol VARCHAR(16) NOT NULL REFERENCES currencies(symbol) ON DELETE CASCADE,
            target_symbol VARCHAR(16) NOT NULL REFERENCES currencies(symbol) ON DELETE CASCADE,
            rate FLOAT NOT NULL,
            UNIQUE (base_symbol, target_symbol)
        );
    """

    __tablename__ = "exchange_rates"

    id: int = Column(Integer, primary_key=True, autoincrement=True)

    base_symbol: str = Column(
        String(16),
        ForeignKey("currencies.symbol", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Indexed for the fan-out cleanup: "delete every edge pointing at X"
    target_symbol: str = Column(
        String(16),
        ForeignKey("currencies.symbol", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Multiplicative factor: amount_in_base * rate = amount_in_target
    rate: float = Column(Float, nullable=False)

    base = relationship(
        "Currency",
        foreign_keys=[base_symbol],
        back_populates="rate_edges",
    )

    __table_args__ = (
        UniqueConstraint("base_symbol", "target_symbol", name="uq_exchange_rates_pair"),
    )

    def __repr__(self) -> str:
        return f"<ExchangeRate({self.base_symbol} -> {self.target_symbol}: {self.rate})>"
