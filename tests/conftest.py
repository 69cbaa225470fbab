from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.go_tree import GoTreeBuilder


@pytest.fixture
def go_tree(tmp_path: Path) -> GoTreeBuilder:
    """Provide a Go project builder rooted at the pytest tmp_path."""
    return GoTreeBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_typeconv_logging() -> Iterator[None]:
    """Drop handlers installed by configure_logging so tests stay isolated."""
    yield
    logger = logging.getLogger("typeconv")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
