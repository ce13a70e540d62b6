"""
Options for image endpoints.
"""

from __future__ import annotations

from collections.abc import Mapping

from aiowharf.opts.auth import AuthOpts
from aiowharf.opts.base import FiltersMixin, QueryOpts


class ListImagesOpts(FiltersMixin, QueryOpts):
    """Query for ``GET /images/json``."""

    def all(self, all: bool) -> ListImagesOpts:
        """Include intermediate images."""
        return self._set("all", all)

    def digests(self, digests: bool) -> ListImagesOpts:
        return self._set("digests", digests)


class CreateImageOpts(QueryOpts):
    """Query for ``POST /images/create`` (pull or import).

    Credentials are not part of the query; they travel in the
    ``X-Registry-Auth`` header.

    Example:
        >>> opts = CreateImageOpts().from_image("alpine").tag("3.19")
    """

    def __init__(self) -> None:
        super().__init__()
        self._auth: AuthOpts | None = None

    def from_image(self, image: str) -> CreateImageOpts:
        """Image to pull, optionally with ``:tag`` or ``@digest``."""
        return self._set("fromImage", image)

    def from_src(self, src: str) -> CreateImageOpts:
        """URL to import from, or ``-`` to read the request body."""
        return self._set("fromSrc", src)

    def repo(self, repo: str) -> CreateImageOpts:
        """Repository name for an imported image."""
        return self._set("repo", repo)

    def tag(self, tag: str) -> CreateImageOpts:
        return self._set("tag", tag)

    def platform(self, platform: str) -> CreateImageOpts:
        """Platform in the form ``os[/arch[/variant]]``."""
        return self._set("platform", platform)

    def auth(self, auth: AuthOpts) -> CreateImageOpts:
        """Registry credentials for private repositories."""
        self._auth = auth
        return self

    @property
    def registry_auth(self) -> AuthOpts | None:
        return self._auth

    @property
    def image_name(self) -> str | None:
        """Reference the created image will be addressable by."""
        name = self._opts.get("fromImage") or self._opts.get("repo")
        if name is None:
            return None
        tag = self._opts.get("tag")
        if tag and ":" not in name.rsplit("/", 1)[-1] and "@" not in name:
            return f"{name}:{tag}"
        return name


# Pull is a create with fromImage set
PullOpts = CreateImageOpts


class ImageBuilderOpts(QueryOpts):
    """Query for ``POST /build``.

    The build context travels as a tar archive in the request body.
    """

    def __init__(self) -> None:
        super().__init__()
        self._auth: AuthOpts | None = None

    def dockerfile(self, path: str) -> ImageBuilderOpts:
        """Path to the Dockerfile inside the build context."""
        return self._set("dockerfile", path)

    def tag(self, tag: str) -> ImageBuilderOpts:
        """``name:tag`` to apply to the result."""
        return self._set("t", tag)

    def extra_hosts(self, hosts: str) -> ImageBuilderOpts:
        return self._set("extrahosts", hosts)

    def remote(self, remote: str) -> ImageBuilderOpts:
        """Git or HTTP URL to use as the build context."""
        return self._set("remote", remote)

    def quiet(self, quiet: bool) -> ImageBuilderOpts:
        """Suppress verbose build output."""
        return self._set("q", quiet)

    def no_cache(self, no_cache: bool) -> ImageBuilderOpts:
        return self._set("nocache", no_cache)

    def pull(self, pull: str) -> ImageBuilderOpts:
        """Attempt to pull the image even if an older one exists locally."""
        return self._set("pull", pull)

    def rm(self, rm: bool) -> ImageBuilderOpts:
        """Remove intermediate containers after a successful build."""
        return self._set("rm", rm)

    def force_rm(self, force_rm: bool) -> ImageBuilderOpts:
        return self._set("forcerm", force_rm)

    def memory(self, memory: int) -> ImageBuilderOpts:
        return self._set("memory", memory)

    def memswap(self, memswap: int) -> ImageBuilderOpts:
        """Total memory (memory + swap); ``-1`` disables swap."""
        return self._set("memswap", memswap)

    def cpu_shares(self, shares: int) -> ImageBuilderOpts:
        return self._set("cpushares", shares)

    def cpu_set_cpus(self, cpus: str) -> ImageBuilderOpts:
        """CPUs in which to allow execution, e.g. ``0-3`` or ``0,1``."""
        return self._set("cpusetcpus", cpus)

    def cpu_period(self, period: int) -> ImageBuilderOpts:
        return self._set("cpuperiod", period)

    def cpu_quota(self, quota: int) -> ImageBuilderOpts:
        return self._set("cpuquota", quota)

    def build_args(self, args: Mapping[str, str]) -> ImageBuilderOpts:
        """Build-time variables, sent as a JSON map."""
        return self._set("buildargs", dict(args))

    def shm_size(self, size: int) -> ImageBuilderOpts:
        """Size of ``/dev/shm`` in bytes."""
        return self._set("shmsize", size)

    def squash(self, squash: bool) -> ImageBuilderOpts:
        return self._set("squash", squash)

    def labels(self, labels: Mapping[str, str]) -> ImageBuilderOpts:
        return self._set("labels", dict(labels))

    def network_mode(self, mode: str) -> ImageBuilderOpts:
        return self._set("networkmode", mode)

    def platform(self, platform: str) -> ImageBuilderOpts:
        return self._set("platform", platform)

    def target(self, target: str) -> ImageBuilderOpts:
        """Build stage to stop at in a multi-stage Dockerfile."""
        return self._set("target", target)

    def outputs(self, outputs: str) -> ImageBuilderOpts:
        return self._set("outputs", outputs)

    def auth(self, auth: AuthOpts) -> ImageBuilderOpts:
        """Credentials for pulling base images from private registries."""
        self._auth = auth
        return self

    @property
    def registry_auth(self) -> AuthOpts | None:
        return self._auth


class PruneImagesOpts(FiltersMixin, QueryOpts):
    """Query for ``POST /images/prune``."""


class SearchImagesOpts(FiltersMixin, QueryOpts):
    """Query for ``GET /images/search``."""

    def term(self, term: str) -> SearchImagesOpts:
        return self._set("term", term)

    def limit(self, limit: int) -> SearchImagesOpts:
        return self._set("limit", limit)

