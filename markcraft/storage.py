"""
storage.py — Upload final SVG logos to InsForge (S3-compatible) storage.

  exporter = LogoExporter(settings.storage)
  result = await exporter.export_concept(refined, mono_color="#000000")
  result.url  → public URL of the stored object

Upload format:
  PUT {base_url}/api/storage/buckets/{bucket}/objects/{key}
  multipart form field "file" (image/svg+xml), Bearer auth
"""

from __future__ import annotations

import logging
import random
import re
import string
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from .config import StorageConfig
from .errors import ExportFailed, excerpt
from .models import Concept
from .svg_tools import to_monochrome

logger = logging.getLogger(__name__)

UPLOAD_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class ExportResult:
    file_name: str
    url: str


def generate_file_name(concept_name: str) -> str:
    """Unique, URL-safe base name: <clean_name>_<epoch ms>_<6 random chars>."""
    clean = re.sub(r"[^a-z0-9]", "_", (concept_name or "logo").lower())
    timestamp = time.time_ns() // 1_000_000
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"{clean}_{timestamp}_{suffix}"


def object_key(file_name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9_-]", "_", file_name) + ".svg"


class LogoExporter:
    def __init__(
        self,
        config: Optional[StorageConfig],
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self._transport = transport

    @property
    def configured(self) -> bool:
        return self.config is not None

    async def upload_svg(self, file_name: str, svg: str) -> ExportResult:
        if self.config is None:
            raise ExportFailed("Storage service not configured (INSFORGE_STORAGE_URL / INSFORGE_STORAGE_KEY)")

        key = object_key(file_name)
        upload_url = f"{self.config.base_url}/api/storage/buckets/{self.config.bucket}/objects/{key}"
        logger.info("Uploading to InsForge: %s", upload_url)

        try:
            async with httpx.AsyncClient(timeout=UPLOAD_TIMEOUT_SECONDS, transport=self._transport) as client:
                resp = await client.put(
                    upload_url,
                    headers={"Authorization": f"Bearer {self.config.api_key}"},
                    files={"file": (key, svg.encode("utf-8"), "image/svg+xml")},
                )
        except httpx.HTTPError as exc:
            raise ExportFailed(f"Upload failed: {type(exc).__name__}: {exc}") from exc

        if not resp.is_success:
            logger.error("InsForge upload failed: %s %s", resp.status_code, excerpt(resp.text))
            raise ExportFailed(
                f"Upload failed: {resp.status_code} {excerpt(resp.text, 300)}",
                status=resp.status_code,
            )

        try:
            body = resp.json()
        except ValueError as exc:
            raise ExportFailed(f"Upload response is not JSON: {excerpt(resp.text)}") from exc

        data = body.get("data") if isinstance(body, dict) else None
        url = (data or {}).get("url") if isinstance(data, dict) else None
        url = url or (body.get("url") if isinstance(body, dict) else None)
        if not url:
            raise ExportFailed(f"Upload response has no URL: {excerpt(resp.text)}")

        logger.info("Upload successful: %s", url)
        return ExportResult(file_name=key, url=url)

    async def export(self, svg: str, concept_name: str) -> ExportResult:
        return await self.upload_svg(generate_file_name(concept_name), svg)

    async def export_concept(self, concept: Concept, mono_color: Optional[str] = None) -> ExportResult:
        """Export ``concept``; with ``mono_color`` the transform runs on its original svg."""
        svg = to_monochrome(concept.svg, mono_color) if mono_color else concept.svg
        return await self.export(svg, concept.name)
