"""Shared domain models used across foliokit components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class Orientation(str, Enum):
    """Page orientation derived from page geometry."""

    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"

    @classmethod
    def from_size(cls, width: float, height: float) -> "Orientation":
        return cls.LANDSCAPE if width > height else cls.PORTRAIT


class FolioContentType(str, Enum):
    """Kind of content carried by a folio created from an imported page."""

    TEXT = "text"
    IMAGE = "image"
    MIXED = "mixed"


class SlotType(str, Enum):
    """Enumeration of placeholder kinds embedded in folio content."""

    DYNAMIC_CONTENT = "dynamic_content"
    AT_FETCHER = "at_fetcher"
    DONNEE = "donnee"
    ANCRE = "ancre"
    SECTION_SPECIALE = "section_speciale"
    COMMENTAIRE = "commentaire"


class DataSourceKind(str, Enum):
    """Backends an ``at_fetcher`` slot can read from."""

    API = "api"
    DATABASE = "database"
    STATIC = "static"


@dataclass(frozen=True)
class PageRange:
    """Represents an inclusive range of page numbers or folio indices."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("Page range start must be less than or equal to end")

    def __contains__(self, value: object) -> bool:
        return isinstance(value, int) and self.start <= value <= self.end

    @classmethod
    def parse(cls, value: str) -> "PageRange":
        """Parse ``"3"`` or ``"2-5"`` into a :class:`PageRange`."""

        token = value.strip()
        if "-" in token:
            start_str, end_str = token.split("-", 1)
            return cls(int(start_str), int(end_str))
        number = int(token)
        return cls(number, number)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "PageRange | None":
        if not data:
            return None
        return cls(int(data["start"]), int(data["end"]))

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}


@dataclass(slots=True)
class SlotMetadata:
    label: str | None = None
    field: str | None = None
    source: str | None = None
    default_value: str | None = None
    placeholder: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "SlotMetadata":
        data = data or {}
        return cls(
            label=data.get("label"),
            field=data.get("field"),
            source=data.get("source"),
            default_value=data.get("defaultValue", data.get("default_value")),
            placeholder=data.get("placeholder"),
        )

    def to_dict(self) -> dict[str, str]:
        payload = {
            "label": self.label,
            "field": self.field,
            "source": self.source,
            "defaultValue": self.default_value,
            "placeholder": self.placeholder,
        }
        return {key: value for key, value in payload.items() if value is not None}


@dataclass(slots=True)
class Slot:
    """A typed placeholder embedded in folio content.

    ``value`` and ``is_filled`` reflect prior user input and take precedence
    over computed resolution.
    """

    id: str
    type: SlotType
    metadata: SlotMetadata = field(default_factory=SlotMetadata)
    is_filled: bool = False
    value: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, SlotType):
            self.type = SlotType(self.type)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Slot":
        return cls(
            id=str(data["id"]),
            type=SlotType(data["type"]),
            metadata=SlotMetadata.from_dict(data.get("metadata")),
            is_filled=bool(data.get("isFilled", data.get("is_filled", False))),
            value=data.get("value"),
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "metadata": self.metadata.to_dict(),
            "isFilled": self.is_filled,
        }
        if self.value is not None:
            payload["value"] = self.value
        return payload


@dataclass(slots=True)
class DataSource:
    """External data provider referenced by ``at_fetcher`` slots."""

    id: str
    kind: DataSourceKind
    base_url: str | None = None
    auth_token: str | None = None
    data: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, DataSourceKind):
            self.kind = DataSourceKind(self.kind)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DataSource":
        return cls(
            id=str(data["id"]),
            kind=DataSourceKind(data.get("kind") or data.get("type")),
            base_url=data.get("baseUrl", data.get("base_url")),
            auth_token=data.get("authToken", data.get("auth_token")),
            data=data.get("data"),
        )


@dataclass(slots=True)
class Folio:
    """One logical page of a document."""

    id: str
    index: int
    orientation: Orientation
    content: str = ""
    slots: list[Slot] = field(default_factory=list)
    content_type: FolioContentType = FolioContentType.TEXT
    image_data_url: str | None = None
    source_page_number: int | None = None
    width: float | None = None
    height: float | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.orientation, Orientation):
            self.orientation = Orientation(self.orientation)
        if not isinstance(self.content_type, FolioContentType):
            self.content_type = FolioContentType(self.content_type)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Folio":
        dimensions = data.get("dimensions") or {}
        return cls(
            id=str(data["id"]),
            index=int(data["index"]),
            orientation=Orientation(data.get("orientation", Orientation.PORTRAIT.value)),
            content=data.get("content") or data.get("textContent") or "",
            slots=[Slot.from_dict(item) for item in data.get("slots", [])],
            content_type=FolioContentType(data.get("contentType", FolioContentType.TEXT.value)),
            image_data_url=data.get("imageDataUrl"),
            source_page_number=data.get("sourcePageNumber"),
            width=dimensions.get("width"),
            height=dimensions.get("height"),
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "index": self.index,
            "orientation": self.orientation.value,
            "content": self.content,
            "slots": [slot.to_dict() for slot in self.slots],
            "contentType": self.content_type.value,
            "sourcePageNumber": self.source_page_number,
        }
        if self.image_data_url is not None:
            payload["imageDataUrl"] = self.image_data_url
        if self.width is not None and self.height is not None:
            payload["dimensions"] = {"width": self.width, "height": self.height}
        return payload


__all__ = [
    "DataSource",
    "DataSourceKind",
    "Folio",
    "FolioContentType",
    "Orientation",
    "PageRange",
    "Slot",
    "SlotMetadata",
    "SlotType",
]
