"""
Injected resources: the organization logo and the fixed reference document.
"""

import asyncio
import base64
import binascii
import io
import os
from typing import Optional

import httpx
from PIL import Image

from ..core.config import Config
from ..core.models import LogoImage
from .logging_config import get_module_logger
from .validators import Validators


class LogoProvider:
    """
    Loads the organization logo once and hands the cached copy to every caller.

    Construct one provider per process and pass it to the assembler. Loading
    is single-flight: concurrent callers wait on the same lock and reuse the
    decoded result. A failed load is not cached, so a later call retries.
    """

    def __init__(self, path: Optional[str] = None, data: Optional[bytes] = None):
        self.path = path if path is not None else Config.LOGO_PATH
        self._data = data
        self._logo: Optional[LogoImage] = None
        self._lock = asyncio.Lock()
        self.load_count = 0
        self.logger = get_module_logger(__name__)

    @property
    def is_loaded(self) -> bool:
        return self._logo is not None

    async def get(self) -> Optional[LogoImage]:
        """Return the cached logo, loading it on first use. ``None`` if unavailable."""
        if self._logo is not None:
            return self._logo
        async with self._lock:
            if self._logo is None:
                self._logo = await self._load()
            return self._logo

    async def _load(self) -> Optional[LogoImage]:
        self.load_count += 1
        data = self._data
        if data is None:
            try:
                data = await asyncio.to_thread(self._read_file)
            except OSError as e:
                self.logger.warning("  > ⚠️ Logo not available at '%s': %s", self.path, e)
                return None

        width, height = Config.DEFAULT_LOGO_SIZE
        try:
            with Image.open(io.BytesIO(data)) as image:
                width, height = image.size
        except Exception as e:
            self.logger.warning("  > ⚠️ Could not read logo dimensions, using %dx%d: %s", width, height, e)

        self.logger.info("  > Logo loaded (%dx%d px).", width, height)
        return LogoImage(data=data, width=width, height=height)

    def _read_file(self) -> bytes:
        with open(self.path, 'rb') as handle:
            return handle.read()


class ReferenceDocumentLoader:
    """
    Resolves the fixed reference document appended to every letter.

    Sources are tried in order: embedded base64 constant, a file in the
    assets directory, then ``<base_url>/assets/<name>.pdf`` over HTTP. A
    candidate is accepted only if it opens as a PDF with at least one page.
    """

    def __init__(self, embedded: Optional[str] = None, assets_dir: Optional[str] = None,
                 base_url: Optional[str] = None, name: Optional[str] = None,
                 timeout: float = Config.REFERENCE_FETCH_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.embedded = embedded if embedded is not None else Config.REFERENCE_DOCUMENT_EMBEDDED
        self.assets_dir = assets_dir if assets_dir is not None else Config.REFERENCE_ASSETS_DIR
        self.base_url = base_url if base_url is not None else Config.REFERENCE_BASE_URL
        self.name = name or Config.REFERENCE_DOCUMENT_NAME
        self.timeout = timeout
        self.transport = transport
        self.logger = get_module_logger(__name__)

    @property
    def filename(self) -> str:
        return f"{self.name}.pdf"

    async def load(self) -> Optional[bytes]:
        """Return the reference PDF bytes, or ``None`` if no source yields a usable PDF."""
        for source, loader in (("embedded", self._load_embedded),
                               ("assets", self._load_from_assets),
                               ("network", self._load_from_network)):
            data = await loader()
            if data is None:
                continue
            check = Validators.validate_pdf_bytes(data)
            if check['valid']:
                self.logger.info("  > Reference document loaded from %s source (%d pages).",
                                 source, check['page_count'])
                return data
            self.logger.warning("  > ⚠️ Reference document from %s source rejected: %s",
                                source, check['error_message'])

        self.logger.warning("  > ⚠️ Reference document '%s' is unavailable.", self.name)
        return None

    async def _load_embedded(self) -> Optional[bytes]:
        if not self.embedded:
            return None
        try:
            return base64.b64decode(self.embedded, validate=False)
        except (binascii.Error, ValueError) as e:
            self.logger.warning("  > ⚠️ Embedded reference document is not valid base64: %s", e)
            return None

    async def _load_from_assets(self) -> Optional[bytes]:
        if not self.assets_dir:
            return None
        path = os.path.join(self.assets_dir, self.filename)
        if not os.path.isfile(path):
            self.logger.debug("  > Reference document not found at %s", path)
            return None

        def _read() -> bytes:
            with open(path, 'rb') as handle:
                return handle.read()

        try:
            return await asyncio.to_thread(_read)
        except OSError as e:
            self.logger.warning("  > ⚠️ Could not read reference document %s: %s", path, e)
            return None

    async def _load_from_network(self) -> Optional[bytes]:
        if not self.base_url:
            return None
        url = f"{self.base_url.rstrip('/')}/assets/{self.filename}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True,
                                         transport=self.transport) as client:
                response = await client.get(url)
                response.raise_for_status()
                return response.content
        except httpx.HTTPError as e:
            self.logger.warning("  > ⚠️ Could not fetch reference document from %s: %s", url, e)
            return None
