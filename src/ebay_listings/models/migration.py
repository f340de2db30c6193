"""Migration result models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ItemResult(BaseModel):
    """Outcome of migrating a single listing."""
    title: str
    source_listing_id: str | None = None
    target_listing_id: str | None = None
    error: str | None = None
    orphaned_sku: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, title: str, source_listing_id: str | None, target_listing_id: str) -> ItemResult:
        return cls(title=title, source_listing_id=source_listing_id, target_listing_id=target_listing_id)

    @classmethod
    def failure(
        cls,
        title: str,
        source_listing_id: str | None,
        error: str,
        orphaned_sku: str | None = None,
    ) -> ItemResult:
        return cls(title=title, source_listing_id=source_listing_id, error=error, orphaned_sku=orphaned_sku)


class MigrationOutcome(BaseModel):
    """Aggregate result of one migration run."""
    enumerated: int = 0
    success_count: int = 0
    failure_count: int = 0
    cancelled: bool = False
    dry_run: bool = False
    results: list[ItemResult] = Field(default_factory=list)

    def record(self, result: ItemResult) -> MigrationOutcome:
        """Fold one item result into the counters."""
        self.results.append(result)
        if result.ok:
            self.success_count += 1
        else:
            self.failure_count += 1
        return self

    @property
    def errors(self) -> list[str]:
        return [f"{r.title}: {r.error}" for r in self.results if r.error]

    @property
    def orphaned_skus(self) -> list[str]:
        return [r.orphaned_sku for r in self.results if r.orphaned_sku]

    @property
    def processed(self) -> int:
        return self.success_count + self.failure_count

    def rows(self) -> list[dict[str, str]]:
        """Per-listing rows for table/json/csv output."""
        return [
            {
                "title": r.title,
                "sourceListingId": r.source_listing_id or "",
                "targetListingId": r.target_listing_id or "",
                "status": "OK" if r.ok else "FAILED",
                "error": r.error or "",
                "orphanedSku": r.orphaned_sku or "",
            }
            for r in self.results
        ]
