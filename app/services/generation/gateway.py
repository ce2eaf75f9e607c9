import base64
import logging
import mimetypes
import json
from dataclasses import dataclass
from typing import Protocol, TypeVar

import httpx
from openai import OpenAI, OpenAIError
from pydantic import BaseModel, ValidationError

from app.core.config import Settings, get_settings
from app.services.storage import resolve_media_path, save_generated_image

logger = logging.getLogger(__name__)

NON_IMAGE_CONTENT_MARKERS = ("xml", "html", "text")

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class GenerationError(Exception):
    """The generation service failed or returned no image."""


@dataclass(slots=True)
class GenerationResult:
    url: str


@dataclass(slots=True)
class ReferenceImage:
    filename: str
    data: bytes
    mime_type: str


class GenerationGateway(Protocol):
    def generate(self, prompt: str, reference_images: list[str]) -> GenerationResult: ...

    def invoke_llm(self, prompt: str, reference_images: list[str], response_schema: type[SchemaT]) -> SchemaT: ...


class OpenAIGateway:
    """Image generation and JSON metadata lookups against OpenAI.

    ``generate`` turns a prompt plus garment reference images into a stored
    generated image. ``invoke_llm`` asks a chat model about the reference images
    and validates its JSON reply against a pydantic schema.
    """

    def __init__(self, settings: Settings | None = None, client: OpenAI | None = None, http: httpx.Client | None = None) -> None:
        self.settings = settings or get_settings()
        self._client = client
        self._http = http

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            if not self.settings.openai_api_key:
                raise GenerationError("OPENAI_API_KEY is not configured.")
            self._client = OpenAI(
                api_key=self.settings.openai_api_key,
                timeout=self.settings.openai_timeout_seconds,
                max_retries=self.settings.openai_max_retries,
            )
        return self._client

    def generate(self, prompt: str, reference_images: list[str]) -> GenerationResult:
        references = self._load_references(reference_images)
        try:
            if references:
                response = self.client.images.edit(
                    model=self.settings.openai_image_model,
                    image=[(ref.filename, ref.data, ref.mime_type) for ref in references],
                    prompt=prompt,
                    size=self.settings.openai_image_size,
                )
            else:
                response = self.client.images.generate(
                    model=self.settings.openai_image_model,
                    prompt=prompt,
                    size=self.settings.openai_image_size,
                )
        except OpenAIError as exc:
            raise GenerationError(str(exc)) from exc

        if not response.data:
            raise GenerationError("Image generation failed: no image in response")
        image = response.data[0]
        if image.b64_json:
            url = save_generated_image(base64.b64decode(image.b64_json), "image/png")
        elif image.url:
            url = image.url
        else:
            raise GenerationError("Image generation failed: no image in response")
        logger.info("image_generated", extra={"reference_count": len(references), "prompt": prompt})
        return GenerationResult(url=url)

    def invoke_llm(self, prompt: str, reference_images: list[str], response_schema: type[SchemaT]) -> SchemaT:
        references = self._load_references(reference_images)
        content: list[dict] = [{"type": "text", "text": prompt}]
        for ref in references:
            encoded = base64.b64encode(ref.data).decode("ascii")
            content.append({"type": "image_url", "image_url": {"url": f"data:{ref.mime_type};base64,{encoded}"}})
        system_prompt = (
            "You describe fashion product images. Return JSON only, matching this schema: "
            f"{json.dumps(response_schema.model_json_schema(), ensure_ascii=True)}"
        )

        raw = self._request_json([{"role": "system", "content": system_prompt}, {"role": "user", "content": content}])
        try:
            return response_schema.model_validate(raw)
        except ValidationError:
            repaired = self._request_json(
                [
                    {"role": "system", "content": system_prompt},
                    {
                        "role": "user",
                        "content": "Fix this JSON so it exactly matches the schema. Return JSON only.\n"
                        + json.dumps(raw, ensure_ascii=True),
                    },
                ]
            )
            try:
                return response_schema.model_validate(repaired)
            except ValidationError as exc:
                raise GenerationError(f"LLM reply did not match {response_schema.__name__}: {exc}") from exc

    def _request_json(self, messages: list[dict]) -> dict:
        try:
            completion = self.client.chat.completions.create(
                model=self.settings.openai_model,
                response_format={"type": "json_object"},
                messages=messages,
            )
        except OpenAIError as exc:
            raise GenerationError(str(exc)) from exc
        content = completion.choices[0].message.content or "{}"
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise GenerationError("LLM reply was not valid JSON") from exc
        return data if isinstance(data, dict) else {}

    def _load_references(self, urls: list[str]) -> list[ReferenceImage]:
        references: list[ReferenceImage] = []
        for idx, url in enumerate(urls):
            if not url:
                continue
            try:
                references.append(self._fetch_reference(url, idx))
            except (httpx.HTTPError, OSError, GenerationError) as exc:
                logger.warning("reference_image_skipped", extra={"url": url, "error": str(exc)})
        return references

    def _fetch_reference(self, url: str, idx: int) -> ReferenceImage:
        local_path = resolve_media_path(url)
        if local_path is not None:
            mime_type = mimetypes.guess_type(local_path.name)[0] or "image/jpeg"
            return ReferenceImage(filename=local_path.name, data=local_path.read_bytes(), mime_type=mime_type)

        if self._http is None:
            self._http = httpx.Client(timeout=self.settings.reference_fetch_timeout_seconds, follow_redirects=True)
        response = self._http.get(url)
        response.raise_for_status()
        content_type = response.headers.get("content-type", "image/jpeg").split(";")[0].strip()
        if any(marker in content_type for marker in NON_IMAGE_CONTENT_MARKERS):
            raise GenerationError(f"Invalid image response: got {content_type} instead of image")
        ext = mimetypes.guess_extension(content_type) or ".jpg"
        return ReferenceImage(filename=f"reference-{idx}{ext}", data=response.content, mime_type=content_type)


def get_generation_gateway() -> GenerationGateway:
    return OpenAIGateway()
