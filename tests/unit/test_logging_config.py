import logging

from nsdb.logging_config import configure_logging


def test_configure_logging_reads_level(tmp_path):
    p = tmp_path / 'nsdb.yml'
    p.write_text('log_level: debug\n', encoding='utf-8')
    logger = configure_logging(p)
    assert logger.name == 'nsdb'
    assert logging.getLogger().level == logging.DEBUG


def test_configure_logging_defaults_to_warning(tmp_path):
    configure_logging(tmp_path / 'missing.yml')
    assert logging.getLogger().level == logging.WARNING


def test_configure_logging_ignores_unknown_level(tmp_path):
    p = tmp_path / 'nsdb.yml'
    p.write_text('log_level: loud\n', encoding='utf-8')
    configure_logging(p)
    assert logging.getLogger().level == logging.WARNING
