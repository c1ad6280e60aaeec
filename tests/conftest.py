#
# Pytest Fixtures
#

# Standard library -----------------------------------------------------------------------------------------------------
import logging

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest
import structlog

# Local ----------------------------------------------------------------------------------------------------------------
from mpfmt.log import LOGGER_NAME
from mpfmt.numeric import ArithmeticContext
from mpfmt.symbols import NumberSymbols


# Fixtures -------------------------------------------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def reset_logging():
    """Restore structlog defaults and the "mpfmt" logger after each test."""
    yield
    structlog.reset_defaults()
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def invariant() -> NumberSymbols:
    return NumberSymbols.invariant()


@pytest.fixture
def de_symbols() -> NumberSymbols:
    """German-style symbols: ',' decimal separator and '.' groups."""
    return NumberSymbols(decimal_separator=",", group_separator=".")


@pytest.fixture
def quad() -> ArithmeticContext:
    return ArithmeticContext.quad()
