"""
Async wrapper around the google-genai SDK.

Only the three calls the extraction pipeline needs are exposed: file upload,
file status lookup and generateContent. SDK and transport failures are
mapped onto the docledger exception hierarchy.
"""

import io
import httpx
from google import genai
from google.genai import errors, types
from loguru import logger
from pydantic import BaseModel
from ..core.config import settings
from ..core.exceptions import InferenceError, RemoteAssetError

STATE_PROCESSING = "PROCESSING"
STATE_ACTIVE = "ACTIVE"
STATE_FAILED = "FAILED"

ContentPart = types.Part


def text_part(text: str) -> ContentPart:
    return types.Part.from_text(text=text)


def file_part(uri: str, mime_type: str) -> ContentPart:
    return types.Part.from_uri(file_uri=uri, mime_type=mime_type)


class RemoteAsset(BaseModel):
    """The fields of an uploaded Gemini file the pipeline cares about"""
    name: str
    uri: str | None = None
    mime_type: str | None = None
    display_name: str | None = None
    state: str | None = None

    @property
    def is_processing(self) -> bool:
        return self.state == STATE_PROCESSING

    @classmethod
    def from_sdk(cls, f: types.File) -> "RemoteAsset":
        if not f.name:
            raise RemoteAssetError(details="Gemini returned a file without a name")
        state = f.state.value if f.state is not None else None
        return cls(name=f.name, uri=f.uri, mime_type=f.mime_type, display_name=f.display_name, state=state)


def _describe(e: Exception) -> str:
    if isinstance(e, errors.APIError):
        return f"HTTP {e.code} {e.message}"
    return str(e) or e.__class__.__name__


class GeminiClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        sdk_client: genai.Client | None = None,
    ):
        if sdk_client is None:
            timeout = timeout or settings.gemini_timeout_seconds
            sdk_client = genai.Client(
                api_key=api_key or settings.gemini_api_key,
                http_options=types.HttpOptions(
                    base_url=base_url or settings.gemini_base_url,
                    timeout=int(timeout * 1000),
                ),
            )
        self._client = sdk_client

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aio.aclose()

    async def upload_file(self, data: bytes, mime_type: str, display_name: str) -> RemoteAsset:
        try:
            uploaded = await self._client.aio.files.upload(
                file=io.BytesIO(data),
                config=types.UploadFileConfig(mime_type=mime_type, display_name=display_name),
            )
        except (errors.APIError, httpx.HTTPError) as e:
            raise RemoteAssetError(details=f"Upload of {display_name} failed: {_describe(e)}") from e

        asset = RemoteAsset.from_sdk(uploaded)
        logger.info("Uploaded file to Gemini", name=asset.name, mime_type=mime_type, size_bytes=len(data))
        return asset

    async def get_file(self, name: str) -> RemoteAsset:
        try:
            f = await self._client.aio.files.get(name=name)
        except (errors.APIError, httpx.HTTPError) as e:
            raise RemoteAssetError(details=f"Status check for {name} failed: {_describe(e)}") from e
        return RemoteAsset.from_sdk(f)

    async def generate_content(self, parts: list[ContentPart], model: str | None = None) -> str:
        """Issue a single generateContent call and return the concatenated text of the first candidate"""
        model = model or settings.gemini_model
        try:
            response = await self._client.aio.models.generate_content(
                model=model,
                contents=[types.Content(role="user", parts=parts)],
            )
        except (errors.APIError, httpx.HTTPError) as e:
            raise InferenceError(details=f"generateContent failed: {_describe(e)}") from e

        if not response.candidates:
            raise InferenceError(details="generateContent returned no candidates")
        content = response.candidates[0].content
        text = "".join(p.text or "" for p in (content.parts if content and content.parts else []))

        logger.info("Gemini response received", model=model, parts=len(parts), response_chars=len(text))
        return text
