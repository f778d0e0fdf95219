import logging

import pytest

from academy.app import create_app
from academy.config import Settings
from academy.utils import Logger, configure_logging


@pytest.fixture(autouse=True)
def restore_level():
    yield
    configure_logging(False)


def test_level_follows_debug_flag():
    log = Logger("level-check")

    configure_logging(True)
    assert log.level == logging.DEBUG

    configure_logging(False)
    assert log.level == logging.INFO


def test_create_app_applies_debug_setting(repo):
    create_app(Settings(debug=True), user_repository=repo)
    assert Logger("request").level == logging.DEBUG

    create_app(Settings(debug=False), user_repository=repo)
    assert Logger("request").level == logging.INFO


def test_logger_names_are_namespaced():
    assert Logger("database")._logger.name == "academy.database"
