"""
Registry credentials.
"""

from __future__ import annotations

from aiowharf.opts.base import BodyOpts


class AuthOpts(BodyOpts):
    """Credentials for ``POST /auth`` and the ``X-Registry-Auth`` header.

    Either a username/password pair or an identity token.

    Example:
        >>> auth = AuthOpts().username("ci").password("s3cret").server_address("ghcr.io")
    """

    def username(self, username: str) -> AuthOpts:
        return self._set("username", username)

    def password(self, password: str) -> AuthOpts:
        return self._set("password", password)

    def email(self, email: str) -> AuthOpts:
        return self._set("email", email)

    def server_address(self, address: str) -> AuthOpts:
        """Registry host, e.g. ``https://index.docker.io/v1/``."""
        return self._set("serveraddress", address)

    def identity_token(self, token: str) -> AuthOpts:
        """Token returned by a previous ``/auth`` call."""
        return self._set("identitytoken", token)

    def __repr__(self) -> str:
        shown = {
            key: "***" if key in ("password", "identitytoken") else value
            for key, value in self._opts.items()
        }
        return f"AuthOpts({shown!r})"
