from pydantic import BaseModel, Field

from itemdex.services.catalog_service import CatalogSummary, DeleteResult, ItemDetail, ReplaceResult
from itemdex.services.pagination import RenderedPage


class ParseStatsOut(BaseModel):
    lines_scanned: int
    accepted: int
    rejected: int
    skipped: int


class ReplaceResultOut(BaseModel):
    item_count: int
    previous_count: int | None = None
    replaced: bool
    stats: ParseStatsOut
    warnings: list[str] = []

    @classmethod
    def from_result(cls, r: ReplaceResult) -> "ReplaceResultOut":
        return cls(
            item_count=r.item_count,
            previous_count=r.previous_count,
            replaced=r.replaced,
            stats=ParseStatsOut(
                lines_scanned=r.stats.lines_scanned,
                accepted=r.stats.accepted,
                rejected=r.stats.rejected,
                skipped=r.stats.skipped,
            ),
            warnings=list(r.warnings),
        )


class DeleteResultOut(BaseModel):
    removed_count: int

    @classmethod
    def from_result(cls, r: DeleteResult) -> "DeleteResultOut":
        return cls(removed_count=r.removed_count)


class ItemSampleOut(BaseModel):
    id: int
    name: str


class CatalogSummaryOut(BaseModel):
    total: int
    seed_count: int
    block_count: int
    samples: list[ItemSampleOut]

    @classmethod
    def from_summary(cls, s: CatalogSummary) -> "CatalogSummaryOut":
        return cls(
            total=s.total,
            seed_count=s.seed_count,
            block_count=s.block_count,
            samples=[ItemSampleOut(id=i, name=n) for i, n in s.samples],
        )


class ItemOut(BaseModel):
    id: int
    name: str
    type: str

    @classmethod
    def from_detail(cls, d: ItemDetail) -> "ItemOut":
        return cls(id=d.id, name=d.name, type=d.type)


class EmbedFieldOut(BaseModel):
    name: str
    value: str
    inline: bool = False


class ControlOut(BaseModel):
    custom_id: str
    label: str
    disabled: bool


class RenderedPageOut(BaseModel):
    page: int
    total_pages: int
    total_matches: int
    title: str
    description: str
    color: int
    fields: list[EmbedFieldOut]
    controls: list[ControlOut]

    @classmethod
    def from_page(cls, p: RenderedPage) -> "RenderedPageOut":
        return cls(
            page=p.page,
            total_pages=p.total_pages,
            total_matches=p.total_matches,
            title=p.payload.title,
            description=p.payload.description,
            color=p.payload.color,
            fields=[EmbedFieldOut(name=f.name, value=f.value, inline=f.inline) for f in p.payload.fields],
            controls=[ControlOut(custom_id=c.custom_id, label=c.label, disabled=c.disabled) for c in p.controls],
        )


class ControlActivationIn(BaseModel):
    control_id: str = Field(min_length=1)
    indicator_label: str
