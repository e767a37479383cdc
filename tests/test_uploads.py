"""Tests for upload field detection and multipart request building.

Verifies structural detection of unsaved binaries at any depth, the
new/existing partition, and that new-file ids are never fabricated.
"""

import json

import pytest

from strapi_adapter.adapters.base import TransportResponse
from strapi_adapter.errors import MalformedPayloadError
from strapi_adapter.translation.dialects import MODERN
from strapi_adapter.translation.models import (
    SINGLE_TYPE,
    CreateParams,
    ExistingFile,
    NewFile,
    Operation,
    UpdateParams,
)
from strapi_adapter.translation.normalizer import ResponseNormalizer
from strapi_adapter.translation.uploads import (
    UploadPipeline,
    build_upload_request,
    get_upload_field_names,
    has_unsaved_binary,
)

from conftest import make_transport


def _png() -> NewFile:
    return NewFile(raw_file=b"\x89PNG", filename="a.png", content_type="image/png")


# ============================================================================
# Test: Detection
# ============================================================================


class TestDetection:
    """Verify the recursive unsaved-binary predicate."""

    def test_new_file_instance(self) -> None:
        assert has_unsaved_binary(_png())

    def test_raw_file_mapping(self) -> None:
        """The admin-UI shape {rawFile: ...} is a marker."""
        assert has_unsaved_binary({"rawFile": b"x", "title": "x.png"})

    def test_nested_deeply(self) -> None:
        """Markers are found inside nested dicts and lists."""
        assert has_unsaved_binary({"blocks": [{"gallery": [{"image": {"rawFile": b"x"}}]}]})

    def test_existing_only(self) -> None:
        """Persisted references alone need no upload."""
        assert not has_unsaved_binary([{"id": 1}, ExistingFile(id=2), 3])

    def test_scalars(self) -> None:
        assert not has_unsaved_binary("rawFile")
        assert not has_unsaved_binary(None)

    def test_field_names_in_record_order(self) -> None:
        """Only top-level fields containing a marker are returned."""
        record = {
            "title": "x",
            "cover": _png(),
            "gallery": [{"id": 1}],
            "block": {"inner": [{"rawFile": b"2"}]},
        }
        assert get_upload_field_names(record) == ["cover", "block"]

    def test_non_mapping_record(self) -> None:
        assert get_upload_field_names(None) == []


# ============================================================================
# Test: Request Building
# ============================================================================


class TestBuildUploadRequest:
    """Verify the new/existing partition and the JSON data part."""

    def test_mixed_new_and_existing(self) -> None:
        """One new + one existing -> one part, field reduced to [3]."""
        record = {"title": "x", "cover": [_png(), ExistingFile(id=3)]}
        data, files = build_upload_request(record, ["cover"])
        assert data == {"title": "x", "cover": [3]}
        assert files == [("files.cover", ("a.png", b"\x89PNG", "image/png"))]

    def test_single_value_field(self) -> None:
        """A non-list field is treated as a one-element sequence."""
        data, files = build_upload_request({"cover": _png()}, ["cover"])
        assert data == {"cover": []}
        assert len(files) == 1

    def test_mapping_references(self) -> None:
        """Existing entries may be mappings with id or _id."""
        record = {"docs": [{"id": 1, "url": "/a"}, {"_id": "b"}, {"rawFile": b"z", "title": "z.txt"}]}
        data, files = build_upload_request(record, ["docs"])
        assert data["docs"] == [1, "b"]
        assert files[0][0] == "files.docs"
        assert files[0][1][0] == "z.txt"

    def test_timestamps_stripped(self) -> None:
        """The data part is sanitized."""
        record = {"cover": _png(), "created_at": "t", "updatedAt": "t"}
        data, _ = build_upload_request(record, ["cover"])
        assert "created_at" not in data
        assert "updatedAt" not in data

    def test_input_not_mutated(self) -> None:
        record = {"cover": [_png(), {"id": 3}]}
        build_upload_request(record, ["cover"])
        assert len(record["cover"]) == 2

    def test_reference_without_id_raises(self) -> None:
        """A non-new entry lacking id/_id fails loudly."""
        with pytest.raises(MalformedPayloadError):
            build_upload_request({"cover": [_png(), {"url": "/x"}]}, ["cover"])

    def test_component_with_id_keeps_structure(self) -> None:
        """A new file inside an identified component is uploaded under its path."""
        record = {"hero": {"id": 5, "title": "Hi", "image": _png()}}
        data, files = build_upload_request(record, ["hero"])
        assert data == {"hero": {"id": 5, "title": "Hi"}}
        assert files == [("files.hero.image", ("a.png", b"\x89PNG", "image/png"))]

    def test_component_without_id(self) -> None:
        """A component needs no id; its nested file list is split in place."""
        record = {"block": {"inner": [{"rawFile": b"2", "title": "b.txt"}, {"id": 9}]}}
        data, files = build_upload_request(record, ["block"])
        assert data == {"block": {"inner": [9]}}
        assert files == [("files.block.inner", ("b.txt", b"2", "application/octet-stream"))]

    def test_repeatable_components_indexed(self) -> None:
        """Positions in a component list become path segments."""
        record = {"blocks": [
            {"__component": "media.banner", "image": ExistingFile(id=1)},
            {"__component": "media.banner", "image": _png()},
        ]}
        data, files = build_upload_request(record, ["blocks"])
        assert data == {"blocks": [
            {"__component": "media.banner", "image": 1},
            {"__component": "media.banner"},
        ]}
        assert [name for name, _ in files] == ["files.blocks.1.image"]


# ============================================================================
# Test: Pipeline
# ============================================================================


class TestUploadPipeline:
    """Verify the multipart request issued by the pipeline."""

    def _pipeline(self, transport) -> UploadPipeline:
        return UploadPipeline(
            "http://h/api", transport, ResponseNormalizer(MODERN, "http://h/api"), populate="*"
        )

    async def test_create_posts_multipart(self) -> None:
        """Create issues POST with one binary part and the JSON data part."""
        transport = make_transport(TransportResponse(json={"data": {"id": 11, "attributes": {}}}))
        params = CreateParams(data={"title": "x", "cover": [_png(), {"id": 3}]})

        envelope = await self._pipeline(transport).submit(Operation.CREATE, "posts", params, ["cover"])

        transport.request.assert_awaited_once()
        call = transport.request.await_args
        assert call.args[0] == "http://h/api/posts?populate=*"
        assert call.kwargs["method"] == "POST"
        assert len(call.kwargs["files"]) == 1
        assert json.loads(call.kwargs["data"]["data"]) == {"title": "x", "cover": [3]}
        assert envelope.data["id"] == 11
        assert envelope.data["title"] == "x"

    async def test_update_puts_to_record(self) -> None:
        """Update issues PUT with the id in the path."""
        transport = make_transport(TransportResponse(json={"data": {"id": 4, "attributes": {"cover": {"data": [
            {"id": 3, "attributes": {"mime": "image/png", "url": "/u/3.png"}},
            {"id": 12, "attributes": {"mime": "image/png", "url": "/u/12.png"}},
        ]}}}}))
        params = UpdateParams(id=4, data={"cover": [{"id": 3}, _png()]})

        envelope = await self._pipeline(transport).submit(Operation.UPDATE, "posts", params, ["cover"])

        call = transport.request.await_args
        assert call.args[0] == "http://h/api/posts/4?populate=*"
        assert call.kwargs["method"] == "PUT"
        # The new file's id comes only from the server response
        assert [f["id"] for f in envelope.data["cover"]] == [3, 12]

    async def test_singleton_update_has_no_id_segment(self) -> None:
        transport = make_transport(TransportResponse(json={"data": {"id": 1, "attributes": {}}}))
        params = UpdateParams(id=SINGLE_TYPE, data={"logo": _png()})

        await self._pipeline(transport).submit(Operation.UPDATE, "homepage", params, ["logo"])

        assert transport.request.await_args.args[0] == "http://h/api/homepage?populate=*"
