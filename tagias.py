# tagias.py - async client for the TAGIAS image annotation API
import asyncio
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import partial
from typing import Any, Dict, List, Optional

from tagias_api_client import APIClient

# no handlers here, the application configures logging
logger = logging.getLogger("tagias")
logger.addHandler(logging.NullHandler())

# CONFIG (override via env TAGIAS_URL / TAGIAS_TIMEOUT, read when a client is built)
TAGIAS_URL = "https://p.tagias.com/api/v2/tagias"


class TagiasTypes(str, Enum):
    BoundingBoxes = "BoundingBoxes"
    Polygons = "Polygons"
    Keypoints = "Keypoints"
    ClassificationSingle = "ClassificationSingle"
    ClassificationMultiple = "ClassificationMultiple"
    Lines = "Lines"


class TagiasStatuses(str, Enum):
    ACTIVE = "ACTIVE"
    STOPPED = "STOPPED"
    SUSPENDED = "SUSPENDED"
    FINISHED = "FINISHED"


class TagiasErrors(str, Enum):
    NONAME = "NONAME"
    NOPICTURES = "NOPICTURES"
    BADPICTURES = "BADPICTURES"
    NOLABELS = "NOLABELS"
    BADCALLBACK = "BADCALLBACK"
    BADBASEURL = "BADBASEURL"
    BADTYPE = "BADTYPE"
    BADSTATUS = "BADSTATUS"
    NOTFOUND = "NOTFOUND"
    INTERNAL = "INTERNAL"
    NOAPIKEY = "NOAPIKEY"
    UNAUTHORIZED = "UNAUTHORIZED"


ERROR_MESSAGES = {
    TagiasErrors.NONAME: "The package name is missing",
    TagiasErrors.NOPICTURES: "The pictures array is empty or missing",
    TagiasErrors.BADPICTURES: "Some of the provided pictures could not be accessed or their URLs are malformed",
    TagiasErrors.NOLABELS: "The labels array for the classification task is missing (or there are less than 2 items in the array)",
    TagiasErrors.BADCALLBACK: "The callback URL is malformed",
    TagiasErrors.BADBASEURL: "The baseurl URL is malformed",
    TagiasErrors.BADTYPE: "The type value is not one of the allowed values",
    TagiasErrors.BADSTATUS: "The status value is not one of the allowed values or this kind of change is not allowed",
    TagiasErrors.NOTFOUND: "The specified object does not exist",
    TagiasErrors.INTERNAL: "An internal error has occurred",
    TagiasErrors.NOAPIKEY: "TAGIAS API Key is not provided",
    TagiasErrors.UNAUTHORIZED: "TAGIAS API Key is incorrect",
}

PACKAGE_DATE_FIELDS = ("created", "started", "stopped", "finished", "updated", "delivered")


def translate_error_code(code) -> str:
    try:
        return ERROR_MESSAGES[TagiasErrors(code)]
    except ValueError:
        return "Unknown error code"


class TagiasError(Exception):
    """Error reported by the TAGIAS API, carrying its code and a readable message."""

    def __init__(self, code):
        self.code = code
        self.message = translate_error_code(code)
        super().__init__(code)

    def __str__(self):
        code = self.code.value if isinstance(self.code, TagiasErrors) else self.code
        return f"{self.message} ({code})"


class TagiasConfigurationError(TagiasError):
    """Raised before any request is made when the client is misconfigured."""


def timeout_from_env() -> Optional[float]:
    value = os.environ.get("TAGIAS_TIMEOUT")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"TAGIAS_TIMEOUT must be a number of seconds, got {value!r}") from None


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Convert a wire timestamp (ISO 8601, possibly ending in 'Z') to a datetime."""
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class Package:
    id: str
    name: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    descr: Optional[str] = None
    labels: Optional[List[str]] = None
    labels_required: Optional[bool] = None
    callback: Optional[str] = None
    baseurl: Optional[str] = None
    created: Optional[datetime] = None
    started: Optional[datetime] = None
    stopped: Optional[datetime] = None
    finished: Optional[datetime] = None
    updated: Optional[datetime] = None
    delivered: Optional[datetime] = None
    amount: Optional[float] = None
    pictures_num: Optional[int] = None
    completed_num: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Package":
        values = {k: data.get(k) for k in cls.__dataclass_fields__ if k in data}
        for k in PACKAGE_DATE_FIELDS:
            if k in values:
                values[k] = parse_date(values[k])
        return cls(**values)


@dataclass(frozen=True)
class NewPackage:
    id: str
    pictures_num: int


@dataclass(frozen=True)
class Annotation:
    name: str
    result: Any = None


@dataclass(frozen=True)
class PackageResult:
    id: Optional[str] = None
    finished: Optional[datetime] = None
    baseurl: Optional[str] = None
    pictures: List[Annotation] = field(default_factory=list)


@dataclass(frozen=True)
class Operation:
    date: Optional[datetime]
    amount: float
    note: Optional[str] = None


@dataclass(frozen=True)
class Balance:
    balance: float
    operations: List[Operation] = field(default_factory=list)


class Tagias:
    """TAGIAS API client.

    Holds the API key and a shared transport configured with the auth headers.
    Every public method is a coroutine doing exactly one HTTP round trip; the
    blocking request runs in the event loop's default executor.
    """

    def __init__(self, api_key: Optional[str], base_url: Optional[str] = None, timeout: Optional[float] = None):
        if not api_key:
            raise TagiasConfigurationError(TagiasErrors.NOAPIKEY)

        self.api_key = api_key
        self.transport = APIClient(
            base_url or os.environ.get("TAGIAS_URL", TAGIAS_URL),
            timeout=timeout if timeout is not None else timeout_from_env(),
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Api-Key {api_key}",
            },
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self.transport.close()

    async def _call(self, method: str, endpoint: str, json_payload=None) -> Dict[str, Any]:
        """Send one request and unwrap the {status, error} envelope."""
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s %s headers=%s", method, self.transport._url(endpoint), self.transport.safe_headers())
        loop = asyncio.get_running_loop()
        resp = await loop.run_in_executor(
            None, partial(self.transport.request, method, endpoint, json_payload=json_payload)
        )

        if resp.status_code == 401:
            logger.warning("%s %s -> 401, API key rejected", method, endpoint)
            raise TagiasError(TagiasErrors.UNAUTHORIZED)
        resp.raise_for_status()

        body = resp.json()
        if body.get("status") != "ok":
            logger.warning("%s %s -> TAGIAS error %s", method, endpoint, body.get("error"))
            raise TagiasError(body.get("error"))
        return body

    async def get_packages(self) -> List[Package]:
        """Return all packages in server order, with `created` parsed."""
        body = await self._call("GET", "/packages")
        return [Package.from_dict(item) for item in body.get("packages") or []]

    async def create_package(self, name, type, descr, labels, callback, baseurl, pictures,
                             labels_required=None) -> NewPackage:
        """Create a package for annotation and return its id and picture count."""
        data = {
            "name": name,
            "type": type,
            "descr": descr,
            "labels": labels,
            "callback": callback,
            "baseurl": baseurl,
            "pictures": pictures,
            "labels_required": labels_required,
        }
        body = await self._call("POST", "/packages", json_payload=data)
        logger.info("Created package %s with %s picture(s)", body.get("id"), body.get("pictures_num"))
        return NewPackage(id=body.get("id"), pictures_num=body.get("pictures_num"))

    async def set_package_status(self, id, status) -> None:
        await self._call("PATCH", f"/packages/{id}", json_payload={"status": status})

    async def get_package(self, id) -> Package:
        body = await self._call("GET", f"/packages/{id}")
        return Package.from_dict(body["package"])

    async def request_result(self, id) -> None:
        """Ask the server to post the available annotations to the package's callback endpoint."""
        await self._call("POST", f"/packages/result/{id}")

    async def get_result(self, id) -> PackageResult:
        """Return the annotations of every picture completed so far."""
        body = await self._call("GET", f"/packages/result/{id}")
        return PackageResult(
            id=body.get("id"),
            finished=parse_date(body.get("finished")),
            baseurl=body.get("baseurl"),
            pictures=[Annotation(name=p.get("name"), result=p.get("result")) for p in body.get("pictures") or []],
        )

    async def get_balance(self) -> Balance:
        body = await self._call("GET", "/balance")
        operations = [
            Operation(date=parse_date(op.get("date")), amount=op.get("amount"), note=op.get("note"))
            for op in body.get("operations") or []
        ]
        return Balance(balance=body.get("balance"), operations=operations)
