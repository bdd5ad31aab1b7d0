"""
Journal dependencies for FastAPI routes.
"""

from __future__ import annotations

from typing import Callable

from auth.schemas import Principal

from . import repository

StoreFactory = Callable[[Principal, str], repository.RecordStore]


async def get_record_store_factory() -> StoreFactory:
    return repository.record_store_for
