"""Pydantic models for the export and import endpoints."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PageRangeModel(BaseModel):
    start: int
    end: int

    @model_validator(mode="after")
    def _check_order(self) -> "PageRangeModel":
        if self.start > self.end:
            raise ValueError("Page range start must be less than or equal to end")
        return self


class ExportFolioModel(BaseModel):
    """A serialized folio submitted for export."""

    id: str
    index: int
    orientation: Literal["portrait", "landscape"] = "portrait"
    html_content: str = Field("", alias="htmlContent")
    css_styles: str = Field("", alias="cssStyles")

    model_config = ConfigDict(populate_by_name=True)


class ExportOptionsModel(BaseModel):
    quality: Literal["draft", "standard", "high", "print"] = "standard"
    paper_size: Literal["a4", "letter", "legal"] = Field("a4", alias="paperSize")
    resolve_slots: bool = Field(True, alias="resolveSlots")
    include_headers: bool = Field(True, alias="includeHeaders")
    include_footers: bool = Field(True, alias="includeFooters")
    include_footnotes: bool = Field(True, alias="includeFootnotes")
    include_comments: bool = Field(False, alias="includeComments")
    include_track_changes: bool = Field(True, alias="includeTrackChanges")
    show_track_changes_markup: bool = Field(False, alias="showTrackChangesMarkup")
    page_range: Optional[PageRangeModel] = Field(None, alias="pageRange")
    embed_fonts: bool = Field(True, alias="embedFonts")
    pdf_a_compliance: Literal["none", "pdf-a-1b", "pdf-a-2b", "pdf-a-3b"] = Field("none", alias="pdfACompliance")

    model_config = ConfigDict(populate_by_name=True)


class ExportMetadataModel(BaseModel):
    title: str = "Untitled Document"
    author: str = ""
    subject: str = ""
    keywords: str = ""
    creator: str = ""
    producer: str = ""
    creation_date: Optional[str] = Field(None, alias="creationDate")
    modification_date: Optional[str] = Field(None, alias="modificationDate")

    model_config = ConfigDict(populate_by_name=True)


class ExportRequestModel(BaseModel):
    """Body of ``POST /api/export-pdf``."""

    folios: List[ExportFolioModel] = Field(default_factory=list)
    options: ExportOptionsModel = Field(default_factory=ExportOptionsModel)
    metadata: ExportMetadataModel = Field(default_factory=ExportMetadataModel)
    resolved_slots: Dict[str, str] = Field(default_factory=dict, alias="resolvedSlots")

    model_config = ConfigDict(populate_by_name=True)


__all__ = [
    "ExportFolioModel",
    "ExportMetadataModel",
    "ExportOptionsModel",
    "ExportRequestModel",
    "PageRangeModel",
]
