"""Tests for the InsForge exporter. Uses httpx.MockTransport — no network access."""

import asyncio
import re

import httpx
import pytest

from markcraft.config import StorageConfig
from markcraft.errors import ExportFailed
from markcraft.models import Concept
from markcraft.storage import LogoExporter, generate_file_name, object_key

STORAGE = StorageConfig(base_url="https://demo.insforge.app", api_key="secret", bucket="logos")


def _exporter(handler, config=STORAGE):
    return LogoExporter(config, transport=httpx.MockTransport(handler))


class TestUploadSvg:

    def test_put_with_auth_and_multipart_body(self, simple_svg):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["content_type"] = request.headers["Content-Type"]
            seen["body"] = request.content
            return httpx.Response(200, json={"data": {"url": "https://cdn.test/logo.svg"}})

        result = asyncio.run(_exporter(handler).upload_svg("night_owl_1_abc123", simple_svg))
        assert result.url == "https://cdn.test/logo.svg"
        assert result.file_name == "night_owl_1_abc123.svg"
        assert seen["method"] == "PUT"
        assert seen["url"] == "https://demo.insforge.app/api/storage/buckets/logos/objects/night_owl_1_abc123.svg"
        assert seen["auth"] == "Bearer secret"
        assert seen["content_type"].startswith("multipart/form-data")
        assert b"image/svg+xml" in seen["body"]
        assert simple_svg.encode("utf-8") in seen["body"]

    def test_top_level_url_is_accepted(self, simple_svg):
        result = asyncio.run(
            _exporter(lambda r: httpx.Response(201, json={"url": "https://cdn.test/a.svg"})).upload_svg("a", simple_svg)
        )
        assert result.url == "https://cdn.test/a.svg"

    def test_error_status(self, simple_svg):
        exporter = _exporter(lambda r: httpx.Response(403, text="bucket is private"))
        with pytest.raises(ExportFailed) as info:
            asyncio.run(exporter.upload_svg("a", simple_svg))
        assert info.value.status == 403
        assert "bucket is private" in str(info.value)

    def test_response_without_url(self, simple_svg):
        exporter = _exporter(lambda r: httpx.Response(200, json={"data": {}}))
        with pytest.raises(ExportFailed):
            asyncio.run(exporter.upload_svg("a", simple_svg))

    def test_non_json_response(self, simple_svg):
        exporter = _exporter(lambda r: httpx.Response(200, text="ok"))
        with pytest.raises(ExportFailed):
            asyncio.run(exporter.upload_svg("a", simple_svg))

    def test_transport_error(self, simple_svg):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(ExportFailed) as info:
            asyncio.run(_exporter(handler).upload_svg("a", simple_svg))
        assert info.value.status is None

    def test_not_configured(self, simple_svg):
        exporter = LogoExporter(None)
        assert not exporter.configured
        with pytest.raises(ExportFailed) as info:
            asyncio.run(exporter.upload_svg("a", simple_svg))
        assert "not configured" in str(info.value)


class TestExportConcept:

    def test_monochrome_variant_is_uploaded(self, gradient_svg):
        bodies = []

        def handler(request):
            bodies.append(request.content)
            return httpx.Response(200, json={"data": {"url": "https://cdn.test/x.svg"}})

        concept = Concept(id="refined", name="Night Owl Professional", description="d", svg=gradient_svg, refined=True)
        result = asyncio.run(_exporter(handler).export_concept(concept, mono_color="#000000"))
        assert result.file_name.startswith("night_owl_professional_")
        assert b"linearGradient" not in bodies[0]
        assert b"#000000" in bodies[0]

    def test_original_colors_without_mono(self, gradient_svg):
        bodies = []

        def handler(request):
            bodies.append(request.content)
            return httpx.Response(200, json={"data": {"url": "https://cdn.test/x.svg"}})

        concept = Concept(id="1", name="Orbit", description="d", svg=gradient_svg)
        asyncio.run(_exporter(handler).export_concept(concept))
        assert b"linearGradient" in bodies[0]


class TestFileNames:

    def test_generate_file_name_format(self):
        name = generate_file_name("Night Owl Professional!")
        assert re.fullmatch(r"night_owl_professional__\d{13}_[a-z0-9]{6}", name)

    def test_generated_names_are_unique(self):
        assert generate_file_name("a") != generate_file_name("a")

    def test_empty_name(self):
        assert generate_file_name("").startswith("logo_")

    def test_object_key_is_sanitized(self):
        assert object_key("my logo.v2") == "my_logo_v2.svg"
