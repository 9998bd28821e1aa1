from __future__ import annotations

import pytest

from foliokit.core.config import DEFAULT_EXPORT_API_URL, ExportServiceConfig
from foliokit.core.exceptions import (
    ConfigurationError,
    ExportCancelledError,
    IncorrectPasswordError,
    PageExtractionError,
    SlotResolutionError,
)
from foliokit.core.model import (
    DataSource,
    DataSourceKind,
    Folio,
    FolioContentType,
    Orientation,
    PageRange,
    Slot,
    SlotType,
)
from foliokit.core.utils import get_nested_value, stringify_value, update_dict


def test_orientation_from_size() -> None:
    assert Orientation.from_size(842, 595) is Orientation.LANDSCAPE
    assert Orientation.from_size(595, 842) is Orientation.PORTRAIT
    assert Orientation.from_size(500, 500) is Orientation.PORTRAIT


@pytest.mark.parametrize(("value", "expected"), [("3", PageRange(3, 3)), (" 2-5 ", PageRange(2, 5))])
def test_page_range_parse(value: str, expected: PageRange) -> None:
    assert PageRange.parse(value) == expected


def test_page_range_rejects_reversed_bounds() -> None:
    with pytest.raises(ValueError):
        PageRange(5, 2)
    with pytest.raises(ValueError):
        PageRange.parse("a-b")


def test_page_range_membership_is_inclusive() -> None:
    page_range = PageRange(1, 3)

    assert 1 in page_range and 3 in page_range
    assert 0 not in page_range and 4 not in page_range


def test_folio_round_trips_wire_format() -> None:
    payload = {
        "id": "folio-1",
        "index": 2,
        "orientation": "landscape",
        "content": "Hello",
        "contentType": "mixed",
        "imageDataUrl": "data:image/png;base64,AA",
        "sourcePageNumber": 3,
        "dimensions": {"width": 842.0, "height": 595.0},
        "slots": [
            {
                "id": "s1",
                "type": "at_fetcher",
                "metadata": {"source": "@crm.name", "defaultValue": "n/a"},
                "isFilled": True,
                "value": "Globex",
            }
        ],
    }

    folio = Folio.from_dict(payload)

    assert folio.orientation is Orientation.LANDSCAPE
    assert folio.content_type is FolioContentType.MIXED
    assert folio.slots[0].type is SlotType.AT_FETCHER
    assert folio.slots[0].metadata.default_value == "n/a"
    assert folio.to_dict() == payload


def test_slot_and_source_coerce_string_enums() -> None:
    assert Slot(id="s", type="donnee").type is SlotType.DONNEE
    source = DataSource.from_dict({"id": "crm", "type": "api", "baseUrl": "https://crm", "authToken": "t"})
    assert source.kind is DataSourceKind.API
    assert source.auth_token == "t"


def test_nested_value_lookup() -> None:
    data = {"client": {"name": "Globex", "contacts": [{"email": "a@b.c"}]}}

    assert get_nested_value(data, "client.name") == "Globex"
    assert get_nested_value(data, "client.contacts.0.email") == "a@b.c"
    assert get_nested_value(data, "client.contacts.4.email") is None
    assert get_nested_value(data, "client.name.first") is None
    assert get_nested_value(data, "") is data


@pytest.mark.parametrize(
    ("value", "expected"),
    [(True, "true"), (3.5, "3.5"), ({"a": "é"}, '{"a": "é"}'), (["x", 1], '["x", 1]')],
)
def test_stringify_value(value, expected: str) -> None:
    assert stringify_value(value) == expected


def test_update_dict_skips_none() -> None:
    assert update_dict({"a": 1}, a=None, b=2) == {"a": 1, "b": 2}


def test_export_config_from_env() -> None:
    config = ExportServiceConfig.from_env(
        {
            "FOLIOKIT_EXPORT_API_URL": "https://render.example/api/export-pdf",
            "FOLIOKIT_EXPORT_TIMEOUT": "15",
            "FOLIOKIT_EXPORT_RETRY_COUNT": "4",
        },
        retry_delay=0.5,
        retry_count=None,
    )

    assert config.api_url == "https://render.example/api/export-pdf"
    assert config.timeout == 15.0
    assert config.retry_count == 4
    assert config.retry_delay == 0.5
    assert config.on_progress(None) is None


def test_export_config_defaults_and_validation() -> None:
    config = ExportServiceConfig.from_env({})

    assert config.api_url == DEFAULT_EXPORT_API_URL
    assert (config.timeout, config.retry_count, config.retry_delay) == (60.0, 2, 1.0)
    with pytest.raises(ValueError):
        ExportServiceConfig.from_env({"FOLIOKIT_EXPORT_RETRY_COUNT": "many"})
    with pytest.raises(ValueError):
        ExportServiceConfig(retry_count=-1)


def test_error_messages_and_hierarchy() -> None:
    assert IncorrectPasswordError().message == "Incorrect password for encrypted PDF."
    assert PageExtractionError(4).message == "Failed to extract page 4."
    assert ExportCancelledError().message == "Export cancelled"
    error = ConfigurationError("Data source not found: crm", slot_id="s1")
    assert isinstance(error, SlotResolutionError)
    assert (error.slot_id, str(error)) == ("s1", "Data source not found: crm")
