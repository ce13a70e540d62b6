"""
Image handles.

Pull, import and build answer 200 immediately and then stream JSON progress
lines; a failure after that point arrives as a line carrying ``error``,
which is raised here as DaemonError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from aiowharf.errors import DaemonError, DecodeError, UsageError
from aiowharf.opts.images import CreateImageOpts, PruneImagesOpts, SearchImagesOpts
from aiowharf.pipeline import JsonLinesDecoder, decode_json
from aiowharf.telemetry import get_logger
from aiowharf.transport.auth import get_registry_auth_header, get_registry_config_header
from aiowharf.types.images import (
    DeletedItem,
    ImageHistory,
    ImageInspect,
    ImageMatch,
    ImagesDeleted,
    ImageSummary,
    ProgressEvent,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Mapping

    from aiowharf.client.core import Docker
    from aiowharf.opts.auth import AuthOpts
    from aiowharf.opts.images import ImageBuilderOpts, ListImagesOpts

logger = get_logger("aiowharf.images")

_IMAGE_ERRORS = {404: "no such image", 500: "server error"}
_TAG_ERRORS = {**_IMAGE_ERRORS, 400: "bad parameter", 409: "conflict"}
_REMOVE_ERRORS = {**_IMAGE_ERRORS, 409: "conflict"}
_CREATE_ERRORS = {404: "repository does not exist or no read access", 500: "server error"}
_BUILD_ERRORS = {400: "bad parameter", 500: "server error"}
_TAR = {"Content-Type": "application/x-tar"}


class Image:
    """Handle on one image, addressed by name, tag or id.

    Example:
        >>> image = docker.image("alpine:3.19")
        >>> info = await image.inspect()
        >>> await image.tag("registry.local/alpine", "3.19")
    """

    def __init__(
        self,
        docker: Docker,
        name: str,
        data: ImageSummary | ImageInspect | None = None,
    ) -> None:
        if not name:
            raise UsageError("Image name must not be empty", field="name")
        self._docker = docker
        self._name = name
        self._data = data

    @property
    def id(self) -> str:
        """Name, tag or id this handle was created with."""
        return self._name

    @property
    def data(self) -> ImageSummary | ImageInspect | None:
        return self._data

    def _path(self, action: str) -> str:
        return f"/images/{quote(self._name, safe='/:@')}/{action}"

    def __repr__(self) -> str:
        return f"Image(id={self._name!r})"

    async def inspect(self) -> ImageInspect:
        """Fetch the image's document and store it in ``data``."""
        response = await self._docker.transport.get(
            self._path("json"), fallback=_IMAGE_ERRORS
        )
        self._data = decode_json(ImageInspect, response.content)
        return self._data

    async def history(self) -> list[ImageHistory]:
        response = await self._docker.transport.get(
            self._path("history"), fallback=_IMAGE_ERRORS
        )
        return decode_json(list[ImageHistory], response.content)

    async def tag(self, repo: str, tag: str | None = None) -> None:
        """Add a ``repo[:tag]`` reference to the image."""
        if not repo:
            raise UsageError("Repository must not be empty", field="repo")
        await self._docker.transport.post(
            self._path("tag"), params={"repo": repo, "tag": tag}, fallback=_TAG_ERRORS
        )
        logger.debug("Image tagged", image=self._name, repo=repo, tag=tag)

    async def remove(self, force: bool = False, no_prune: bool = False) -> list[DeletedItem]:
        return await Images(self._docker).remove(self._name, force=force, no_prune=no_prune)


class Images:
    """Image collection of one client."""

    def __init__(self, docker: Docker) -> None:
        self._docker = docker

    def _raise_on_error(self, event: ProgressEvent, path: str) -> None:
        if event.is_error:
            raise DaemonError.from_response(
                200,
                event.to_document(),
                url=self._docker.transport.url_for(path),
            )

    async def _progress(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        fallback: Mapping[int, str],
    ) -> AsyncIterator[ProgressEvent]:
        decoder = JsonLinesDecoder(ProgressEvent)
        async with self._docker.transport.stream(
            "POST", path, params=params, content=content, headers=headers, fallback=fallback
        ) as response:
            async for event in decoder.decode(response.aiter_bytes()):
                self._raise_on_error(event, path)
                yield event

    async def list(self, opts: ListImagesOpts | None = None) -> list[Image]:
        params = opts.to_query() if opts is not None else None
        response = await self._docker.transport.get(
            "/images/json", params=params, fallback={500: "server error"}
        )
        summaries = decode_json(list[ImageSummary], response.content)
        return [Image(self._docker, summary.id, summary) for summary in summaries]

    def get(self, name: str) -> Image:
        """Return a handle without contacting the daemon."""
        return Image(self._docker, name)

    async def create_stream(self, opts: CreateImageOpts) -> AsyncIterator[ProgressEvent]:
        """Pull or import an image, yielding progress as it arrives.

        Raises:
            UsageError: If neither ``from_image`` nor ``from_src`` is set
            DaemonError: On an error status, or an error line in the stream
        """
        if not (opts.get("fromImage") or opts.get("fromSrc")):
            raise UsageError(
                "Image create needs from_image or from_src", field="fromImage"
            )
        async for event in self._progress(
            "/images/create",
            params=opts.to_query(),
            headers=get_registry_auth_header(opts.registry_auth),
            fallback=_CREATE_ERRORS,
        ):
            yield event

    async def create(self, opts: CreateImageOpts) -> Image:
        """Pull or import an image and wait for it to finish."""
        imported_id = None
        async for event in self.create_stream(opts):
            logger.debug(
                "Image progress", id=event.id, status=event.status, progress=event.progress
            )
            # Imports without a repo report only the new image id
            if event.status and event.status.startswith("sha256:"):
                imported_id = event.status
        name = opts.image_name or imported_id
        if name is None:
            raise DecodeError("Image create finished without naming the image")
        logger.debug("Image created", image=name)
        return Image(self._docker, name)

    async def pull(
        self, image: str, tag: str | None = "latest", auth: AuthOpts | None = None
    ) -> Image:
        """Pull ``image:tag`` from its registry.

        A tag or digest already present in ``image`` takes precedence.
        """
        opts = CreateImageOpts().from_image(image)
        has_reference = "@" in image or ":" in image.rsplit("/", 1)[-1]
        if tag and not has_reference:
            opts.tag(tag)
        if auth is not None:
            opts.auth(auth)
        return await self.create(opts)

    async def build(
        self, context: bytes, opts: ImageBuilderOpts | None = None
    ) -> AsyncIterator[ProgressEvent]:
        """Build an image from a tar build context.

        Args:
            context: Tar archive holding the Dockerfile and its inputs
            opts: Build options (tag, Dockerfile path, build args, ...)

        Yields:
            Build output lines (``stream``) and final ``aux`` events
        """
        headers = dict(_TAR)
        params = None
        if opts is not None:
            headers.update(get_registry_config_header(opts.registry_auth))
            params = opts.to_query()
        async for event in self._progress(
            "/build", params=params, content=context, headers=headers, fallback=_BUILD_ERRORS
        ):
            yield event

    async def import_(self, archive: bytes) -> list[ProgressEvent]:
        """Load images from a tar archive produced by ``docker save``."""
        events = [
            event
            async for event in self._progress(
                "/images/load",
                content=archive,
                headers=_TAR,
                fallback={500: "server error"},
            )
        ]
        logger.debug("Images loaded", events=len(events))
        return events

    async def search(
        self,
        term: str,
        limit: int | None = None,
        filters: Mapping[str, list[str]] | None = None,
    ) -> list[ImageMatch]:
        """Search the registry for images."""
        if not term:
            raise UsageError("Search term must not be empty", field="term")
        opts = SearchImagesOpts().term(term)
        if limit is not None:
            opts.limit(limit)
        if filters:
            opts.filters(filters)
        response = await self._docker.transport.get(
            "/images/search", params=opts.to_query(), fallback={500: "server error"}
        )
        return decode_json(list[ImageMatch], response.content)

    async def prune(self, filters: Mapping[str, list[str]] | None = None) -> ImagesDeleted:
        """Delete unused images."""
        opts = PruneImagesOpts()
        if filters:
            opts.filters(filters)
        response = await self._docker.transport.post(
            "/images/prune", params=opts.to_query(), fallback={500: "server error"}
        )
        result = decode_json(ImagesDeleted, response.content)
        logger.debug("Images pruned", space_reclaimed=result.space_reclaimed)
        return result

    async def remove(
        self, name: str, force: bool = False, no_prune: bool = False
    ) -> list[DeletedItem]:
        """Remove an image and return what was untagged and deleted."""
        if not name:
            raise UsageError("Image name must not be empty", field="name")
        response = await self._docker.transport.delete(
            f"/images/{quote(name, safe='/:@')}",
            params={"force": force, "noprune": no_prune},
            fallback=_REMOVE_ERRORS,
        )
        return decode_json(list[DeletedItem], response.content)
