"""
Porter collaborator interfaces.

Restoring, publishing, verifying, cache management, feed initialization and manifest
authoring are carried out by services supplied by the hosting installation. Commands
only know the narrow protocols below and reach them through a Services container;
asking for a service nobody supplied raises ServiceUnavailableError.
"""
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from .faults import ServiceUnavailableError
from .resources import ENGLISH


@dataclass(frozen=True)
class RestoreRequest:
    target: str | None
    sources: tuple = ()
    fallback_sources: tuple = ()
    packages_directory: str | None = None
    solution_directory: str | None = None
    no_http_cache: bool = False
    direct_download: bool = False
    parallel: bool = True
    package_save_mode: str | None = None
    require_consent: bool = False
    project_timeout: int | None = None
    msbuild_version: str | None = None
    msbuild_path: str | None = None
    recursive: bool = False
    force: bool = False
    use_lock_file: bool = False
    locked_mode: bool = False
    lock_file_path: str | None = None
    force_evaluate: bool = False
    interactive: bool = True


@dataclass(frozen=True)
class VerifyRequest:
    packages: tuple
    signatures: bool = False
    all: bool = False
    fingerprints: tuple = ()


@runtime_checkable
class Restorer(Protocol):
    async def restore(self, request, /): ...


@runtime_checkable
class Publisher(Protocol):
    async def delete(self, package, version, /, *, source, api_key=None, no_service_endpoint=False): ...


@runtime_checkable
class Verifier(Protocol):
    async def verify(self, request, /): ...


@runtime_checkable
class Locals(Protocol):
    def locations(self): ...
    async def clear(self, resource, /): ...


@runtime_checkable
class Feed(Protocol):
    async def initialize(self, source, destination, /, *, expand=False): ...


@runtime_checkable
class Manifest(Protocol):
    async def create(self, package, /, *, assembly=None, force=False): ...


@dataclass
class Services:
    """
    the collaborators available to commands (None = not supplied).
    """
    restorer: Restorer | None = None
    publisher: Publisher | None = None
    verifier: Verifier | None = None
    locals: Locals | None = None
    feed: Feed | None = None
    manifest: Manifest | None = None
    extra: dict = field(default_factory=dict)

    def require(self, name, /, *, messages=ENGLISH):
        """
        return the service called name or raise ServiceUnavailableError.
        """
        service = getattr(self, name, None) if name != "extra" else None
        if service is None:
            service = self.extra.get(name)
        if service is None:
            raise ServiceUnavailableError(messages("service-unavailable", service=name), service=name)
        return service


__all__ = (
    "RestoreRequest",
    "VerifyRequest",
    "Restorer",
    "Publisher",
    "Verifier",
    "Locals",
    "Feed",
    "Manifest",
    "Services",
)
