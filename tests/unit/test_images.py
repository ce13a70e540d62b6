"""Tests for image handles."""

import base64
import json

import httpx
import pytest

from aiowharf import DaemonError, Image, UsageError
from aiowharf.opts import AuthOpts, CreateImageOpts, ImageBuilderOpts, ListImagesOpts
from aiowharf.types import ImageInspect


def progress_lines(*events: dict) -> bytes:
    return b"".join(json.dumps(event).encode() + b"\r\n" for event in events)


def httpx_url(url_path: str, /, **params: str) -> str:
    return str(httpx.URL(f"http://127.0.0.1:2375{url_path}", params=params))


class TestImages:
    """Tests for the image collection."""

    @pytest.mark.asyncio
    async def test_list(self, docker, httpx_mock) -> None:
        """Test list entries become handles keyed by image id."""
        httpx_mock.add_response(
            url="http://127.0.0.1:2375/images/json?all=true",
            json=[
                {"Id": "sha256:e216a057b1cb", "RepoTags": ["alpine:3.19"], "Size": 7377000},
                {"Id": "sha256:3e2f21a89f6a", "RepoTags": ["<none>:<none>"], "Containers": -1},
            ],
        )

        images = await docker.images().list(ListImagesOpts().all(True))

        assert [i.id for i in images] == ["sha256:e216a057b1cb", "sha256:3e2f21a89f6a"]
        assert images[0].data.repo_tags == ["alpine:3.19"]
        await docker.close()

    @pytest.mark.asyncio
    async def test_inspect_and_history(self, docker, httpx_mock) -> None:
        """Test a tagged name is kept readable in the path."""
        httpx_mock.add_response(
            url="http://127.0.0.1:2375/images/alpine:3.19/json",
            json={"Id": "sha256:e216a057b1cb", "Os": "linux", "Architecture": "amd64"},
        )
        httpx_mock.add_response(
            url="http://127.0.0.1:2375/images/alpine:3.19/history",
            json=[{"Id": "sha256:e216a057b1cb", "CreatedBy": "/bin/sh", "Size": 0}],
        )
        image = docker.image("alpine:3.19")

        info = await image.inspect()
        history = await image.history()

        assert isinstance(image.data, ImageInspect)
        assert info.os == "linux"
        assert history[0].created_by == "/bin/sh"
        await docker.close()

    @pytest.mark.asyncio
    async def test_inspect_missing(self, docker, httpx_mock) -> None:
        """Test a missing image raises a 404 DaemonError."""
        httpx_mock.add_response(
            url="http://127.0.0.1:2375/images/nope/json",
            status_code=404,
            json={"message": "No such image: nope:latest"},
        )

        with pytest.raises(DaemonError) as exc_info:
            await docker.image("nope").inspect()

        assert exc_info.value.is_not_found
        await docker.close()

    @pytest.mark.asyncio
    async def test_tag(self, docker, httpx_mock) -> None:
        """Test tag sends repo and tag as parameters."""
        httpx_mock.add_response(
            url=httpx_url("/images/alpine:3.19/tag", repo="registry.local/alpine", tag="prod"),
            method="POST",
            status_code=201,
        )

        await docker.image("alpine:3.19").tag("registry.local/alpine", "prod")
        await docker.close()

    @pytest.mark.asyncio
    async def test_tag_needs_repo(self, docker) -> None:
        """Test an empty repository is rejected locally."""
        with pytest.raises(UsageError):
            await docker.image("alpine").tag("")

    def test_empty_name(self, docker) -> None:
        """Test a handle needs a name."""
        with pytest.raises(UsageError):
            docker.image("")

    @pytest.mark.asyncio
    async def test_pull(self, docker, httpx_mock) -> None:
        """Test pull drains progress and names the pulled image."""
        httpx_mock.add_response(
            url=httpx_url("/images/create", fromImage="alpine", tag="3.19"),
            method="POST",
            content=progress_lines(
                {"status": "Pulling from library/alpine", "id": "3.19"},
                {"status": "Downloading", "progressDetail": {"current": 10, "total": 20}},
                {"status": "Status: Downloaded newer image for alpine:3.19"},
            ),
        )

        image = await docker.images().pull("alpine", "3.19")

        assert isinstance(image, Image)
        assert image.id == "alpine:3.19"
        assert docker.stats.streams_active == 0
        await docker.close()

    @pytest.mark.asyncio
    async def test_pull_keeps_explicit_reference(self, docker, httpx_mock) -> None:
        """Test a tag in the image name is not overridden."""
        httpx_mock.add_response(
            url=httpx_url("/images/create", fromImage="registry.local:5000/app:v2"),
            method="POST",
            content=progress_lines({"status": "Already exists"}),
        )

        image = await docker.images().pull("registry.local:5000/app:v2")

        assert image.id == "registry.local:5000/app:v2"
        await docker.close()

    @pytest.mark.asyncio
    async def test_pull_with_auth(self, docker, httpx_mock) -> None:
        """Test registry credentials travel in the auth header."""
        httpx_mock.add_response(
            url=httpx_url("/images/create", fromImage="ghcr.io/acme/app", tag="latest"),
            method="POST",
            content=progress_lines({"status": "Pull complete"}),
        )
        auth = AuthOpts().username("ci").password("s3cret").server_address("ghcr.io")

        await docker.images().pull("ghcr.io/acme/app", auth=auth)

        request = httpx_mock.get_request()
        header = request.headers["X-Registry-Auth"]
        assert json.loads(base64.urlsafe_b64decode(header)) == {
            "username": "ci",
            "password": "s3cret",
            "serveraddress": "ghcr.io",
        }
        assert "s3cret" not in str(request.url)
        await docker.close()

    @pytest.mark.asyncio
    async def test_pull_error_line(self, docker, httpx_mock) -> None:
        """Test an error reported after the 200 status raises DaemonError."""
        httpx_mock.add_response(
            url=httpx_url("/images/create", fromImage="private/app", tag="latest"),
            method="POST",
            content=progress_lines(
                {"status": "Pulling from private/app"},
                {
                    "error": "pull access denied",
                    "errorDetail": {"message": "pull access denied for private/app"},
                },
            ),
        )

        with pytest.raises(DaemonError) as exc_info:
            await docker.images().pull("private/app")

        assert exc_info.value.status_code == 200
        assert exc_info.value.message == "pull access denied for private/app"
        assert docker.stats.streams_active == 0
        await docker.close()

    @pytest.mark.asyncio
    async def test_create_stream(self, docker, httpx_mock) -> None:
        """Test progress events are yielded as they arrive."""
        httpx_mock.add_response(
            url=httpx_url("/images/create", fromImage="alpine", tag="latest"),
            method="POST",
            content=progress_lines(
                {"status": "Pulling fs layer", "id": "4abcf2066143"},
                {"status": "Pull complete", "id": "4abcf2066143"},
            ),
        )
        opts = CreateImageOpts().from_image("alpine").tag("latest")

        events = [event async for event in docker.images().create_stream(opts)]

        assert [e.status for e in events] == ["Pulling fs layer", "Pull complete"]
        await docker.close()

    @pytest.mark.asyncio
    async def test_create_needs_source(self, docker) -> None:
        """Test create requires an image or a source."""
        with pytest.raises(UsageError):
            await docker.images().create(CreateImageOpts().tag("latest"))

    @pytest.mark.asyncio
    async def test_import_from_source(self, docker, httpx_mock) -> None:
        """Test an import without a repo is named by the reported id."""
        httpx_mock.add_response(
            url=httpx_url("/images/create", fromSrc="http://example.com/rootfs.tar"),
            method="POST",
            content=progress_lines({"status": "sha256:9b5d3c6e0f1a"}),
        )

        image = await docker.images().create(
            CreateImageOpts().from_src("http://example.com/rootfs.tar")
        )

        assert image.id == "sha256:9b5d3c6e0f1a"
        await docker.close()

    @pytest.mark.asyncio
    async def test_build(self, docker, httpx_mock) -> None:
        """Test build uploads the context and streams its output."""
        httpx_mock.add_response(
            url=httpx_url("/build", t="app:1.0", dockerfile="Dockerfile.prod"),
            method="POST",
            content=progress_lines(
                {"stream": "Step 1/2 : FROM alpine\n"},
                {"aux": {"ID": "sha256:7f6c2a"}},
                {"stream": "Successfully tagged app:1.0\n"},
            ),
        )
        opts = ImageBuilderOpts().tag("app:1.0").dockerfile("Dockerfile.prod")

        events = [event async for event in docker.images().build(b"context-tar", opts)]

        assert events[0].stream == "Step 1/2 : FROM alpine\n"
        assert events[1].aux == {"ID": "sha256:7f6c2a"}
        request = httpx_mock.get_request()
        assert request.headers["Content-Type"] == "application/x-tar"
        assert request.content == b"context-tar"
        await docker.close()

    @pytest.mark.asyncio
    async def test_build_error(self, docker, httpx_mock) -> None:
        """Test a failed build step raises DaemonError."""
        httpx_mock.add_response(
            url="http://127.0.0.1:2375/build",
            method="POST",
            content=progress_lines(
                {"stream": "Step 1/2 : RUN false\n"},
                {"errorDetail": {"code": 1, "message": "returned a non-zero code: 1"}},
            ),
        )

        with pytest.raises(DaemonError) as exc_info:
            async for _ in docker.images().build(b"context-tar"):
                pass

        assert exc_info.value.message == "returned a non-zero code: 1"
        await docker.close()

    @pytest.mark.asyncio
    async def test_import_archive(self, docker, httpx_mock) -> None:
        """Test loading a saved archive."""
        httpx_mock.add_response(
            url="http://127.0.0.1:2375/images/load",
            method="POST",
            content=progress_lines({"stream": "Loaded image: alpine:3.19\n"}),
        )

        events = await docker.images().import_(b"saved-tar")

        assert [e.stream for e in events] == ["Loaded image: alpine:3.19\n"]
        await docker.close()

    @pytest.mark.asyncio
    async def test_search(self, docker, httpx_mock) -> None:
        """Test registry search results."""
        httpx_mock.add_response(
            url=httpx_url("/images/search", term="alpine", limit="2"),
            json=[
                {"name": "alpine", "is_official": True, "star_count": 10000},
                {"name": "alpine/git", "description": "git", "star_count": 200},
            ],
        )

        matches = await docker.images().search("alpine", limit=2)

        assert [m.name for m in matches] == ["alpine", "alpine/git"]
        assert matches[0].is_official
        assert not matches[1].is_official
        await docker.close()

    @pytest.mark.asyncio
    async def test_prune(self, docker, httpx_mock) -> None:
        """Test prune reports deleted images and reclaimed space."""
        httpx_mock.add_response(
            url=httpx_url("/images/prune", filters='{"dangling":["true"]}'),
            method="POST",
            json={
                "ImagesDeleted": [{"Deleted": "sha256:3e2f21a89f6a"}],
                "SpaceReclaimed": 1024,
            },
        )

        result = await docker.images().prune({"dangling": ["true"]})

        assert result.space_reclaimed == 1024
        assert result.images_deleted[0].deleted == "sha256:3e2f21a89f6a"
        await docker.close()

    @pytest.mark.asyncio
    async def test_remove(self, docker, httpx_mock) -> None:
        """Test remove reports untagged and deleted layers."""
        httpx_mock.add_response(
            url=httpx_url("/images/alpine:3.19", force="true", noprune="false"),
            method="DELETE",
            json=[{"Untagged": "alpine:3.19"}, {"Deleted": "sha256:e216a057b1cb"}],
        )

        items = await docker.image("alpine:3.19").remove(force=True)

        assert [(i.untagged, i.deleted) for i in items] == [
            ("alpine:3.19", None),
            (None, "sha256:e216a057b1cb"),
        ]
        await docker.close()

    @pytest.mark.asyncio
    async def test_remove_in_use(self, docker, httpx_mock) -> None:
        """Test removing an image used by a container is a conflict."""
        httpx_mock.add_response(
            url=httpx_url("/images/alpine", force="false", noprune="false"),
            method="DELETE",
            status_code=409,
        )

        with pytest.raises(DaemonError) as exc_info:
            await docker.images().remove("alpine")

        assert exc_info.value.message == "conflict"
        await docker.close()
