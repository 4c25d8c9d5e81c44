"""ClearlyDefined API client and curation conversion.

Usage:
    client = ClearlyDefinedClient(server_url("production"))
    patch  = to_contribution_patch(curation)         # raises CurationError
    result = client.put_curations(patch)             # {"prNumber": ..., "url": ...}
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests
import yaml

from ort.utils import OrtError

SERVERS = {
    "production": "https://api.clearlydefined.io",
    "development": "https://dev-api.clearlydefined.io",
    "localhost": "http://localhost:4000",
}

# ORT package type -> (ClearlyDefined type, provider)
COORDINATE_TYPES = {
    "cocoapods": ("pod", "cocoapods"),
    "crate": ("crate", "cratesio"),
    "gem": ("gem", "rubygems"),
    "go": ("go", "golang"),
    "maven": ("maven", "mavencentral"),
    "npm": ("npm", "npmjs"),
    "nuget": ("nuget", "nuget"),
    "pypi": ("pypi", "pypi"),
}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ClearlyDefinedError(OrtError):
    """Base exception for all client errors."""


class NetworkError(ClearlyDefinedError):
    """Raised on connection timeout or unreachable server."""


class CurationError(OrtError):
    """Raised when a curation file or entry cannot be converted."""


# ---------------------------------------------------------------------------
# Curations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PackageCuration:
    id: str
    comment: str = ""
    concluded_license: str | None = None
    homepage_url: str | None = None
    description: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "PackageCuration":
        data = raw.get("curations") or {}
        return cls(
            id=str(raw["id"]),
            comment=str(data.get("comment", "") or ""),
            concluded_license=data.get("concluded_license", None),
            homepage_url=data.get("homepage_url", None),
            description=data.get("description", None),
        )


def read_curations(path: Path) -> list[PackageCuration]:
    """Read a list of package curations from a YAML file.

    Raises:
        CurationError: if the file is missing or malformed.
    """
    path = Path(path)
    if not path.is_file():
        raise CurationError(f"Curations file not found: '{path}'")

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise CurationError(f"Failed to parse '{path}': {exc}") from exc

    if raw is None:
        return []
    if not isinstance(raw, list):
        raise CurationError(f"'{path}' must contain a YAML list of curations.")

    try:
        return [PackageCuration.from_dict(entry) for entry in raw]
    except (KeyError, TypeError, AttributeError) as exc:
        raise CurationError(f"Invalid curation in '{path}': {exc}") from exc


def to_coordinates(package_id: str) -> dict[str, str]:
    """Convert an ORT identifier ``Type:namespace:name:version`` to ClearlyDefined coordinates."""
    parts = package_id.split(":")
    if len(parts) != 4:
        raise CurationError(f"Invalid package identifier '{package_id}', expected 'type:namespace:name:version'.")

    ort_type, namespace, name, version = parts
    try:
        cd_type, provider = COORDINATE_TYPES[ort_type.lower()]
    except KeyError:
        raise CurationError(f"Package type '{ort_type}' of '{package_id}' is not supported by ClearlyDefined.") from None

    coordinates = {"type": cd_type, "provider": provider, "name": name, "revision": version}
    if namespace:
        coordinates["namespace"] = namespace
    return coordinates


def to_contribution_patch(curation: PackageCuration) -> dict[str, Any]:
    coordinates = to_coordinates(curation.id)
    coordinates_text = "/".join(
        coordinates.get(key, "-") for key in ("type", "provider", "namespace", "name", "revision")
    )

    revision: dict[str, Any] = {}
    if curation.concluded_license:
        revision["licensed"] = {"declared": curation.concluded_license}
    described: dict[str, str] = {}
    if curation.homepage_url:
        described["projectWebsite"] = curation.homepage_url
    if curation.description:
        described["description"] = curation.description
    if described:
        revision["described"] = described

    patch_coordinates = {k: v for k, v in coordinates.items() if k != "revision"}
    return {
        "contributionInfo": {
            "type": "Other",
            "summary": f"Curation for component {coordinates_text}.",
            "details": "Imported from curation data of the OSS Review Toolkit.",
            "resolution": curation.comment or "Unknown, original data contains no comment.",
            "removedDefinitions": False,
        },
        "patches": [
            {
                "coordinates": patch_coordinates,
                "revisions": {coordinates["revision"]: revision},
            }
        ],
    }


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

def server_url(server: str) -> str:
    """Map a server name to its base URL; URLs are passed through."""
    if server in SERVERS:
        return SERVERS[server]
    if server.startswith(("http://", "https://")):
        return server
    raise ClearlyDefinedError(f"Unknown ClearlyDefined server '{server}'. Known servers: {', '.join(SERVERS)}")


class ClearlyDefinedClient:
    """Thin wrapper around the ClearlyDefined REST API."""

    def __init__(self, url: str, timeout: int = 30) -> None:
        self.base_url = url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()

    def put_curations(self, patch: dict[str, Any]) -> dict:
        """Submit a contribution patch and return the created pull request info.

        Raises:
            ClearlyDefinedError: any non-2xx response
            NetworkError:        timeout or connection failure
        """
        return self._request("PATCH", "/curations", json=patch)

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> dict:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting '{url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(
                f"Unable to reach ClearlyDefined server at '{self.base_url}'"
            ) from exc

        if not response.ok:
            raise ClearlyDefinedError(
                f"Unexpected response {response.status_code} from {url}: {response.text[:200]}"
            )

        try:
            return response.json()
        except requests.exceptions.JSONDecodeError as exc:
            raise ClearlyDefinedError(
                f"Invalid JSON in response {response.status_code} from {url}: {response.text[:200]}"
            ) from exc
