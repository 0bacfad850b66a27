from __future__ import annotations

import os
from collections.abc import Generator

import pytest

from domain.services.measure_block import BlockMeasurer
from domain.style import Style, resolve_style
from tests.helpers.fake_typesetter import FakeTypesetter


def _clear_fdg_env() -> None:
    for key in list(os.environ):
        if key.startswith("FDG_"):
            os.environ.pop(key, None)


_clear_fdg_env()


@pytest.fixture(autouse=True)
def clear_fdg_env() -> Generator[None, None, None]:
    _clear_fdg_env()
    yield
    _clear_fdg_env()


@pytest.fixture
def typesetter() -> FakeTypesetter:
    return FakeTypesetter(
        sizes={
            "tall": (40.0, 30.0),
            "wide": (60.0, 20.0),
            "span": (60.0, 100.0),
        }
    )


@pytest.fixture
def measurer(typesetter: FakeTypesetter) -> BlockMeasurer:
    return BlockMeasurer(typesetter)


@pytest.fixture
def style() -> Style:
    return resolve_style()
