"""
End-to-end extraction: uploaded files in, record sets (or degraded text) out.

Files are handled strictly one after another. Spreadsheets are flattened to
text and sent inline; PDFs and images are uploaded and referenced by URI;
anything else is skipped, as is any upload that comes back without a URI.
One generateContent call is made per request.
"""

from dataclasses import dataclass
from loguru import logger
from ..core.config import settings
from ..core.exceptions import IngestError
from ..models.extraction import DegradedResult, ExtractionResult
from .gemini import ContentPart, GeminiClient, file_part, text_part
from .normalizer import MediaKind, classify_media_type, resolve_media_type, spreadsheet_to_text
from .parser import parse_extraction_response
from .prompt import EXTRACTION_PROMPT
from .uploader import RemoteAssetUploader


@dataclass
class SourceFile:
    filename: str
    content_type: str | None
    data: bytes

    @property
    def kind(self) -> MediaKind:
        return classify_media_type(self.content_type, self.filename)

    @property
    def media_type(self) -> str:
        return resolve_media_type(self.content_type, self.filename)


class ExtractionOrchestrator:
    def __init__(self, client: GeminiClient, uploader: RemoteAssetUploader | None = None, model: str | None = None):
        self.client = client
        self.uploader = uploader or RemoteAssetUploader(client)
        self.model = model or settings.gemini_model

    async def build_contents(self, files: list[SourceFile]) -> list[ContentPart]:
        """
        Assemble the instruction block followed by one part per usable file,
        in submission order.
        """
        contents: list[ContentPart] = [text_part(EXTRACTION_PROMPT)]

        for f in files:
            kind = f.kind
            if kind == MediaKind.SPREADSHEET:
                text = spreadsheet_to_text(f.data, f.filename)
                contents.append(text_part(f"\n\n=== Excel File: {f.filename} ===\n{text}"))
            elif kind in (MediaKind.DOCUMENT, MediaKind.IMAGE):
                asset = await self.uploader.upload(f.data, f.media_type, f.filename)
                if not asset.uri:
                    logger.warning("Skipping file without a usable URI", filename=f.filename, name=asset.name)
                    continue
                contents.append(file_part(asset.uri, asset.mime_type))
            else:
                logger.warning("Skipping unsupported file", filename=f.filename, content_type=f.content_type)

        return contents

    async def extract(self, files: list[SourceFile]) -> ExtractionResult | DegradedResult:
        """
        Run one extraction request.

        Raises:
            IngestError: no files supplied (checked before any network call)
            DecodeError, RemoteAssetError, InferenceError: a file or the
                inference call failed; the whole batch is abandoned
        """
        if not files:
            raise IngestError(details="At least one file is required for extraction")

        logger.info("Extraction started", files=len(files), model=self.model)
        contents = await self.build_contents(files)
        text = await self.client.generate_content(contents, model=self.model)
        result = parse_extraction_response(text)

        logger.info(
            "Extraction finished",
            files=len(files),
            parts=len(contents),
            degraded=isinstance(result, DegradedResult),
        )
        return result
