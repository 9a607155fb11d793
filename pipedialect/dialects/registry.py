"""Dialect providers and the registry that scores them.

A :class:`DialectProvider` scores how well its dialect handles a connection
target; the :class:`DialectRegistry` asks every registered provider and
instantiates the best one.  New dialects are added by registering a provider,
never by editing the registry::

    registry = DialectRegistry()
    registry.register(SubprotocolBasedProvider("oracle", OracleDialect, "oracle"))
    dialect = registry.find_best_for("oracle+cx_oracle://db/prod", config)
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from pipedialect.config import DialectConfig
from pipedialect.errors import NoMatchingDialectError

if TYPE_CHECKING:
    from pipedialect.dialects.generic import GenericDialect

log = structlog.get_logger(__name__)

_JDBC_PREFIX = "jdbc:"


# ---------------------------------------------------------------------------
# Connection target
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConnectionTarget:
    """The parts of a connection URL a provider scores against.

    Attributes:
        subprotocol: Text before the first ``:`` (``mysql+pymysql``, ``derby``).
        subname: Everything after that ``:``.
        url: The URL as given.
    """

    subprotocol: str
    subname: str
    url: str

    @classmethod
    def parse(cls, url: str) -> ConnectionTarget:
        """Split ``url`` into subprotocol and subname.

        An optional ``jdbc:`` prefix is ignored, so ``jdbc:mysql://host/db``
        and ``mysql://host/db`` both have the subprotocol ``mysql``.
        """
        rest = strip_jdbc_prefix(url)
        subprotocol, _, subname = rest.partition(":")
        return cls(subprotocol=subprotocol, subname=subname, url=url)

    @property
    def backend(self) -> str:
        """The subprotocol without a SQLAlchemy ``+driver`` suffix."""
        return self.subprotocol.partition("+")[0]


def strip_jdbc_prefix(url: str) -> str:
    if url[: len(_JDBC_PREFIX)].lower() == _JDBC_PREFIX:
        return url[len(_JDBC_PREFIX):]
    return url


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


class DialectProvider(ABC):
    """Scores connection targets and creates one kind of dialect.

    Attributes:
        name: Unique provider name, also accepted by :meth:`DialectRegistry.create`.
    """

    NO_MATCH_SCORE = 0
    MINIMUM_MATCHING_SCORE = 1
    AVERAGE_MATCHING_SCORE = 10
    PERFECT_MATCHING_SCORE = 1000

    def __init__(self, name: str, dialect_cls: type[GenericDialect]) -> None:
        self.name = name
        self.dialect_cls = dialect_cls

    @abstractmethod
    def score(self, target: ConnectionTarget) -> int:
        """Return how well this provider matches ``target`` (0 means no match)."""

    def create(self, config: DialectConfig) -> GenericDialect:
        return self.dialect_cls(config)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class SubprotocolBasedProvider(DialectProvider):
    """Scores a perfect match when the target's subprotocol is one of its own.

    The comparison is case-insensitive and ignores a SQLAlchemy ``+driver``
    suffix, so ``postgresql+psycopg2`` matches the ``postgresql`` subprotocol.
    Vendors that put a variant in the subname are matched by prefix against
    ``subprotocol:subname``.
    """

    def __init__(
        self, name: str, dialect_cls: type[GenericDialect], *subprotocols: str
    ) -> None:
        super().__init__(name, dialect_cls)
        self.subprotocols = tuple(s.lower() for s in subprotocols)

    def score(self, target: ConnectionTarget) -> int:
        backend = target.backend.lower()
        full = f"{target.subprotocol}:{target.subname}".lower()
        for subprotocol in self.subprotocols:
            if backend == subprotocol or full.startswith(subprotocol):
                return self.PERFECT_MATCHING_SCORE
        return self.NO_MATCH_SCORE


class FixedScoreProvider(DialectProvider):
    """Scores every target the same; used for the catch-all generic dialect."""

    def __init__(self, name: str, dialect_cls: type[GenericDialect], score: int) -> None:
        super().__init__(name, dialect_cls)
        self.fixed_score = score

    def score(self, target: ConnectionTarget) -> int:
        return self.fixed_score


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class DialectRegistry:
    """Ordered collection of dialect providers.

    Registration order matters only for ties: the first registered provider
    with the highest score wins.
    """

    def __init__(self, providers: Iterable[DialectProvider] = ()) -> None:
        self._providers: list[DialectProvider] = []
        for provider in providers:
            self.register(provider)

    def register(self, provider: DialectProvider) -> DialectProvider:
        """Add ``provider``; a provider with the same name is replaced in place."""
        for index, existing in enumerate(self._providers):
            if existing.name == provider.name:
                self._providers[index] = provider
                return provider
        self._providers.append(provider)
        return provider

    def provider_names(self) -> list[str]:
        """Return provider names in registration order."""
        return [p.name for p in self._providers]

    def find_best_for(self, url: str, config: DialectConfig) -> GenericDialect:
        """Create the dialect whose provider scores ``url`` highest.

        Raises:
            NoMatchingDialectError: If no provider scores at least
                :attr:`DialectProvider.MINIMUM_MATCHING_SCORE`.
        """
        target = ConnectionTarget.parse(url)
        best: DialectProvider | None = None
        best_score = DialectProvider.NO_MATCH_SCORE
        for provider in self._providers:
            score = provider.score(target)
            log.debug(
                "dialect_provider_scored",
                provider=provider.name,
                subprotocol=target.subprotocol,
                score=score,
            )
            if score > best_score:
                best, best_score = provider, score
        if best is None or best_score < DialectProvider.MINIMUM_MATCHING_SCORE:
            raise NoMatchingDialectError(url, self.provider_names())
        log.info("dialect_selected", provider=best.name, score=best_score)
        return best.create(config)

    def create(self, name: str, config: DialectConfig) -> GenericDialect:
        """Create the dialect registered under provider ``name``.

        Raises:
            NoMatchingDialectError: If no provider has that name.
        """
        for provider in self._providers:
            if provider.name.lower() == name.lower():
                log.info("dialect_selected", provider=provider.name, by="name")
                return provider.create(config)
        raise NoMatchingDialectError(name, self.provider_names())
