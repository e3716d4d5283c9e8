"""
Pytest fixtures for the cash ledger test suite.

Provides:
- A deterministic clock pinned to a mid-afternoon business day
- The bundled module keyword table and a ledger config using it
- Engine and service instances wired to those fixtures

No database, no network: every test runs against in-memory snapshots.
"""

from datetime import datetime

import pytest

from cashbook_config import load_default_keyword_table
from cashbook_config.schema import LedgerConfig, ModuleKeywordTable
from cashbook_engines import (
    BalanceCalculator,
    PeriodSummaryBuilder,
    StatementGenerator,
    TransactionNormalizer,
)
from cashbook_kernel.domain.clock import DeterministicClock
from cashbook_services import CashLedgerService

# Monday 15 January 2024, 14:30 local time
NOW = datetime(2024, 1, 15, 14, 30)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(NOW)


@pytest.fixture
def keyword_table() -> ModuleKeywordTable:
    return load_default_keyword_table()


@pytest.fixture
def ledger_config(keyword_table) -> LedgerConfig:
    return LedgerConfig(keyword_table=keyword_table)


@pytest.fixture
def normalizer(keyword_table) -> TransactionNormalizer:
    return TransactionNormalizer(keyword_table)


@pytest.fixture
def calculator() -> BalanceCalculator:
    return BalanceCalculator()


@pytest.fixture
def summary_builder(calculator) -> PeriodSummaryBuilder:
    return PeriodSummaryBuilder(calculator)


@pytest.fixture
def statement_generator(calculator) -> StatementGenerator:
    return StatementGenerator(calculator)


@pytest.fixture
def ledger_service(deterministic_clock, ledger_config) -> CashLedgerService:
    return CashLedgerService(clock=deterministic_clock, config=ledger_config)
