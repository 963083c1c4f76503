"""
Tests for simplicial_markov.config and simplicial_markov.logging_config.
"""

import io
import logging

import pytest
from simplicial_markov.config import MarkovConfig, DEFAULT_CONFIG
from simplicial_markov.logging_config import setup_logging, PACKAGE_LOGGER


class TestMarkovConfig:

    def test_defaults(self):
        assert DEFAULT_CONFIG.delta == 1e-5
        assert DEFAULT_CONFIG.convex_params_tol == 1e-12

    def test_voltol(self):
        assert MarkovConfig(delta=1e-3).voltol(10) == pytest.approx(1e-4)

    def test_voltol_needs_simplices(self):
        with pytest.raises(ValueError):
            MarkovConfig().voltol(0)

    def test_rejects_non_positive(self):
        with pytest.raises(ValueError):
            MarkovConfig(delta=0.0)
        with pytest.raises(ValueError):
            MarkovConfig(convex_params_tol=-1.0)


@pytest.fixture
def package_logger():
    """Package logger, with its handlers and level restored afterwards."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)


class TestSetupLogging:

    def test_configures_package_logger(self, package_logger):
        logger = setup_logging(level=logging.DEBUG)
        assert logger is package_logger
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_level_by_name(self, package_logger):
        assert setup_logging('warning').level == logging.WARNING
        with pytest.raises(ValueError):
            setup_logging('chatty')

    def test_module_records_reach_stream(self, package_logger):
        from simplicial_markov import markov
        stream = io.StringIO()
        setup_logging(stream=stream)
        markov.logger.info("built %d rows", 3)
        markov.logger.debug("hidden")
        output = stream.getvalue()
        assert 'simplicial_markov.markov: built 3 rows' in output
        assert 'hidden' not in output

    def test_repeated_calls_replace_handlers(self, package_logger, tmp_path):
        log_file = tmp_path / 'run.log'
        setup_logging()
        logger = setup_logging(log_file=str(log_file))
        assert len(logger.handlers) == 2
        logger.warning("to file")
        first = logger.handlers[1]
        setup_logging()
        assert len(logger.handlers) == 1
        assert first.stream is None
        assert 'to file' in log_file.read_text(encoding='utf-8')

    def test_module_loggers_are_children(self):
        from simplicial_markov import markov
        assert markov.logger.name.startswith(PACKAGE_LOGGER + '.')
