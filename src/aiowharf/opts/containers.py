"""
Options for container endpoints.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from aiowharf.opts.base import BodyOpts, FiltersMixin, QueryOpts


class ListContainersOpts(FiltersMixin, QueryOpts):
    """Query for ``GET /containers/json``.

    Example:
        >>> opts = ListContainersOpts().all(True).limit(10)
    """

    def all(self, all: bool) -> ListContainersOpts:
        """Include stopped containers (default shows only running ones)."""
        return self._set("all", all)

    def limit(self, limit: int) -> ListContainersOpts:
        """Return at most ``limit`` most recently created containers."""
        return self._set("limit", limit)

    def size(self, size: bool) -> ListContainersOpts:
        """Report SizeRw and SizeRootFs."""
        return self._set("size", size)


class ContainerBuilderOpts(BodyOpts):
    """Body for ``POST /containers/create``.

    Example:
        >>> opts = (
        ...     ContainerBuilderOpts()
        ...     .image("ubuntu:latest")
        ...     .cmd(["/bin/echo", "hello"])
        ...     .env(["HTTP_PROXY=http://proxy.domain.com"])
        ... )
    """

    def hostname(self, hostname: str) -> ContainerBuilderOpts:
        return self._set("Hostname", hostname)

    def domain_name(self, domain_name: str) -> ContainerBuilderOpts:
        return self._set("Domainname", domain_name)

    def user(self, user: str) -> ContainerBuilderOpts:
        """User that commands run as inside the container."""
        return self._set("User", user)

    def attach_stdin(self, attach: bool) -> ContainerBuilderOpts:
        return self._set("AttachStdin", attach)

    def attach_stdout(self, attach: bool) -> ContainerBuilderOpts:
        return self._set("AttachStdout", attach)

    def attach_stderr(self, attach: bool) -> ContainerBuilderOpts:
        return self._set("AttachStderr", attach)

    def tty(self, tty: bool) -> ContainerBuilderOpts:
        """Attach standard streams to a TTY.

        Output of TTY containers is not multiplexed; pass ``tty=True`` when
        reading their logs.
        """
        return self._set("Tty", tty)

    def open_stdin(self, open: bool) -> ContainerBuilderOpts:
        return self._set("OpenStdin", open)

    def stdin_once(self, stdin_once: bool) -> ContainerBuilderOpts:
        """Close stdin after the first attached client disconnects."""
        return self._set("StdinOnce", stdin_once)

    def env(self, env: Iterable[str]) -> ContainerBuilderOpts:
        """Environment variables in the form ``["VAR=value", ...]``."""
        return self._set("Env", list(env))

    def cmd(self, cmd: Iterable[str]) -> ContainerBuilderOpts:
        """Command to run."""
        return self._set("Cmd", list(cmd))

    def args_escaped(self, escaped: bool) -> ContainerBuilderOpts:
        return self._set("ArgsEscaped", escaped)

    def image(self, image: str) -> ContainerBuilderOpts:
        """Name of the image to create the container from."""
        return self._set("Image", image)

    def working_dir(self, dir: str) -> ContainerBuilderOpts:
        return self._set("WorkingDir", dir)

    def entrypoint(self, entrypoint: Iterable[str]) -> ContainerBuilderOpts:
        return self._set("Entrypoint", list(entrypoint))

    def network_disabled(self, disabled: bool) -> ContainerBuilderOpts:
        return self._set("NetworkDisabled", disabled)

    def mac_address(self, addr: str) -> ContainerBuilderOpts:
        return self._set("MacAddress", addr)

    def on_build(self, triggers: Iterable[str]) -> ContainerBuilderOpts:
        """ONBUILD metadata defined in the image's Dockerfile."""
        return self._set("OnBuild", list(triggers))

    def stop_signal(self, signal: str) -> ContainerBuilderOpts:
        return self._set("StopSignal", signal)

    def stop_timeout(self, timeout: int) -> ContainerBuilderOpts:
        """Seconds to wait after StopSignal before killing."""
        return self._set("StopTimeout", timeout)

    def shell(self, shell: Iterable[str]) -> ContainerBuilderOpts:
        """Shell used when RUN, CMD and ENTRYPOINT use the shell form."""
        return self._set("Shell", list(shell))

    def labels(self, labels: Mapping[str, str]) -> ContainerBuilderOpts:
        return self._set("Labels", dict(labels))

    def exposed_ports(self, ports: Iterable[str]) -> ContainerBuilderOpts:
        """Ports in the form ``"port/<tcp|udp|sctp>"``."""
        return self._set("ExposedPorts", {port: {} for port in ports})

    def port_bindings(
        self, bindings: Mapping[str, Iterable[Mapping[str, str]]]
    ) -> ContainerBuilderOpts:
        """Host port bindings.

        Args:
            bindings: ``{"80/tcp": [{"HostIp": "0.0.0.0", "HostPort": "8080"}]}``
        """
        return self._set(
            "HostConfig.PortBindings",
            {port: [dict(b) for b in hosts] for port, hosts in bindings.items()},
        )

    def volumes(self, mounts: Iterable[str]) -> ContainerBuilderOpts:
        """Bind mounts in the form ``"/host/path:/container/path[:ro]"``."""
        return self._set("HostConfig.Binds", list(mounts))

    def memory(self, limit: int) -> ContainerBuilderOpts:
        """Memory limit in bytes."""
        return self._set("HostConfig.Memory", limit)

    def network_mode(self, mode: str) -> ContainerBuilderOpts:
        """bridge, host, none, container:<name|id>, or a custom network name."""
        return self._set("HostConfig.NetworkMode", mode)

    def auto_remove(self, auto_remove: bool) -> ContainerBuilderOpts:
        return self._set("HostConfig.AutoRemove", auto_remove)

    def privileged(self, privileged: bool) -> ContainerBuilderOpts:
        return self._set("HostConfig.Privileged", privileged)


CreateContainerOpts = ContainerBuilderOpts


class RmContainerOpts(QueryOpts):
    """Query for ``DELETE /containers/{id}``."""

    def volumes(self, volumes: bool) -> RmContainerOpts:
        """Remove anonymous volumes associated with the container."""
        return self._set("v", volumes)

    def force(self, force: bool) -> RmContainerOpts:
        """Kill the container first if it is running."""
        return self._set("force", force)

    def link(self, link: bool) -> RmContainerOpts:
        """Remove the link instead of the container."""
        return self._set("link", link)


class ContainerLogsOpts(QueryOpts):
    """Query for ``GET /containers/{id}/logs``.

    The daemon returns nothing unless at least one of ``stdout`` or
    ``stderr`` is set.
    """

    def follow(self, follow: bool) -> ContainerLogsOpts:
        """Keep the connection open and stream new output."""
        return self._set("follow", follow)

    def stdout(self, stdout: bool) -> ContainerLogsOpts:
        return self._set("stdout", stdout)

    def stderr(self, stderr: bool) -> ContainerLogsOpts:
        return self._set("stderr", stderr)

    def since(self, since: int) -> ContainerLogsOpts:
        """Only logs since this UNIX timestamp."""
        return self._set("since", since)

    def until(self, until: int) -> ContainerLogsOpts:
        """Only logs before this UNIX timestamp."""
        return self._set("until", until)

    def timestamps(self, timestamps: bool) -> ContainerLogsOpts:
        return self._set("timestamps", timestamps)

    def tail(self, tail: int | str) -> ContainerLogsOpts:
        """Number of lines from the end, or ``"all"``."""
        return self._set("tail", tail)


class UploadArchiveOpts(QueryOpts):
    """Query for ``PUT /containers/{id}/archive``."""

    def path(self, path: str) -> UploadArchiveOpts:
        """Directory in the container to extract the archive into."""
        return self._set("path", path)

    def no_overwrite(self, no_overwrite: bool) -> UploadArchiveOpts:
        """Fail if extraction would replace a directory with a non-directory or back."""
        return self._set("noOverwriteDirNonDir", no_overwrite)

    def copy_uid_gid(self, copy_uid_gid: bool) -> UploadArchiveOpts:
        """Keep the archive's UID/GID ownership."""
        return self._set("copyUIDGID", copy_uid_gid)


class AttachOpts(QueryOpts):
    """Query for ``POST /containers/{id}/attach``."""

    def detach_keys(self, keys: str) -> AttachOpts:
        return self._set("detachKeys", keys)

    def logs(self, logs: bool) -> AttachOpts:
        """Replay previous output before streaming."""
        return self._set("logs", logs)

    def stream(self, stream: bool) -> AttachOpts:
        """Stream output as it is produced."""
        return self._set("stream", stream)

    def stdin(self, stdin: bool) -> AttachOpts:
        return self._set("stdin", stdin)

    def stdout(self, stdout: bool) -> AttachOpts:
        return self._set("stdout", stdout)

    def stderr(self, stderr: bool) -> AttachOpts:
        return self._set("stderr", stderr)


class ExecOpts(BodyOpts):
    """Body for ``POST /containers/{id}/exec``.

    ``detach`` is not part of the create body; it is sent with the start
    request together with ``tty``.
    """

    _START_KEYS = ("Detach",)

    def attach_stdin(self, attach: bool) -> ExecOpts:
        return self._set("AttachStdin", attach)

    def attach_stdout(self, attach: bool) -> ExecOpts:
        return self._set("AttachStdout", attach)

    def attach_stderr(self, attach: bool) -> ExecOpts:
        return self._set("AttachStderr", attach)

    def detach_keys(self, keys: str) -> ExecOpts:
        return self._set("DetachKeys", keys)

    def detach(self, detach: bool) -> ExecOpts:
        """Start the exec process without attaching to its output."""
        return self._set("Detach", detach)

    def tty(self, tty: bool) -> ExecOpts:
        return self._set("Tty", tty)

    def env(self, env: Iterable[str]) -> ExecOpts:
        return self._set("Env", list(env))

    def cmd(self, cmd: Iterable[str]) -> ExecOpts:
        return self._set("Cmd", list(cmd))

    def privileged(self, allow: bool) -> ExecOpts:
        return self._set("Privileged", allow)

    def user(self, user: str) -> ExecOpts:
        """One of ``user``, ``user:group``, ``uid`` or ``uid:gid``."""
        return self._set("User", user)

    def working_dir(self, dir: str) -> ExecOpts:
        return self._set("WorkingDir", dir)

    @property
    def is_tty(self) -> bool:
        return bool(self._opts.get("Tty", False))

    @property
    def is_detached(self) -> bool:
        return bool(self._opts.get("Detach", False))

    def to_body(self) -> dict:
        body = super().to_body()
        for key in self._START_KEYS:
            body.pop(key, None)
        return body

    def to_start_body(self) -> dict:
        """Body for ``POST /exec/{id}/start``."""
        return {"Detach": self.is_detached, "Tty": self.is_tty}
