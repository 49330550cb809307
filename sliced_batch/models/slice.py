"""
ORM model for slice persistence.

Contract:
    SliceModel persists one slice of one job in one category.  Has
    ``to_dto()`` to read it back as a ``Slice``.

Architecture: sliced_batch/models. Imports from batch_kernel.db.base only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import JSON, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from batch_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from sliced_batch.domain.types import Slice


class SliceModel(TrackedBase):
    """Persistent slice record."""

    __tablename__ = "batch_slices"

    __table_args__ = (
        Index("ix_batch_slices_job_category_state", "job_id", "category", "state"),
        Index("ix_batch_slices_job_category_index", "job_id", "category", "slice_index"),
    )

    job_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    slice_index: Mapped[int] = mapped_column(Integer, nullable=False)
    state: Mapped[str] = mapped_column(String(20), nullable=False)
    record_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    worker_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    failure_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    failure_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    records: Mapped[list[Any] | None] = mapped_column(JSON, nullable=True)

    def to_dto(self) -> Slice:
        from sliced_batch.domain.types import Slice, SliceCategoryName, SliceState

        return Slice(
            slice_id=self.id,
            job_id=self.job_id,
            category=SliceCategoryName(self.category),
            state=SliceState(self.state),
            slice_index=self.slice_index,
            record_count=self.record_count,
            worker_name=self.worker_name,
            failure_count=self.failure_count,
            failure_message=self.failure_message,
            records=tuple(self.records or ()),
        )
