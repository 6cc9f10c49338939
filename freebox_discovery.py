from __future__ import annotations

import logging
import queue
import time
from typing import Iterable, Iterator, Optional

import requests
from zeroconf import ServiceBrowser, ServiceStateChange, Zeroconf

from freebox_client import HttpClient
from freebox_client_exceptions import DiscoveryException
from freebox_models import ApiVersion, DiscoveryStrategy
from freebox_utils import opt_int

API_VERSION_URL = "http://mafreebox.freebox.fr/api_version"
MDNS_SERVICE = "_fbx-api._tcp.local."
MDNS_TIMEOUT = 5.0
MDNS_INFO_TIMEOUT_MS = 3000

logger = logging.getLogger(__name__)


def discover(strategy: DiscoveryStrategy, http: HttpClient,
             mdns_timeout: float = MDNS_TIMEOUT, logger: Optional[logging.Logger] = None) -> ApiVersion:
    """Locate the Freebox and return its (valid) ApiVersion."""
    log = logger or logging.getLogger(__name__)
    if strategy == DiscoveryStrategy.HTTP:
        api_version = discover_http(http, log)
    elif strategy == DiscoveryStrategy.MDNS:
        api_version = discover_mdns(mdns_timeout, log)
    else:
        raise DiscoveryException(f"wrong discovery strategy {strategy}")
    log.debug(f"Discovered {api_version}")
    return api_version


def discover_http(http: HttpClient, log: logging.Logger = logger) -> ApiVersion:
    log.info(f"Freebox discovery: GET {API_VERSION_URL}")
    try:
        data = http.fetch_json(API_VERSION_URL)
    except (requests.RequestException, ValueError) as e:
        raise DiscoveryException(f"could not reach {API_VERSION_URL}: {e}") from e
    if not isinstance(data, dict):
        raise DiscoveryException(f"unexpected answer from {API_VERSION_URL}")

    api_version = ApiVersion.from_dict(data)
    if not api_version.is_valid():
        raise DiscoveryException("could not get a valid API version (HTTPS must be available)")
    return api_version


def discover_mdns(timeout: float = MDNS_TIMEOUT, log: logging.Logger = logger) -> ApiVersion:
    log.info(f"Freebox discovery: mDNS {MDNS_SERVICE}")
    api_version = first_valid_record(mdns_records(timeout, log))
    if api_version is None:
        raise DiscoveryException("mDNS timeout")
    return api_version


def first_valid_record(records: Iterable[tuple[str, list[str]]]) -> Optional[ApiVersion]:
    for name, fields in records:
        api_version = parse_mdns_record(name, fields)
        if api_version.is_valid():
            return api_version
        logger.debug(f"Skipping incomplete mDNS record {name}")
    return None


def parse_mdns_record(name: str, fields: Iterable[str]) -> ApiVersion:
    """Build an ApiVersion from an mDNS instance name and its TXT key=value entries."""
    device_name = name.split(".", 1)[0].replace("\\", "")
    values = {"device_name": device_name}
    for entry in fields:
        key, sep, value = entry.partition("=")
        if not sep:
            continue
        if key == "https_port":
            if opt_int(value) is None:
                continue
            values[key] = value
        elif key == "https_available":
            values[key] = value == "1"
        elif key in ("api_domain", "uid", "api_version", "api_base_url", "device_type"):
            values[key] = value
    return ApiVersion.from_dict(values)


def mdns_records(timeout: float, log: logging.Logger = logger) -> Iterator[tuple[str, list[str]]]:
    """Yield (instance name, TXT entries) for every Freebox answering within timeout seconds."""
    names: queue.Queue[str] = queue.Queue()

    def on_service_state_change(zeroconf: Zeroconf, service_type: str, name: str,
                                state_change: ServiceStateChange) -> None:
        if state_change in (ServiceStateChange.Added, ServiceStateChange.Updated):
            names.put(name)

    zc = Zeroconf()
    browser = ServiceBrowser(zc, MDNS_SERVICE, handlers=[on_service_state_change])
    deadline = time.monotonic() + timeout
    try:
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            try:
                name = names.get(timeout=remaining)
            except queue.Empty:
                break
            info = zc.get_service_info(MDNS_SERVICE, name, timeout=MDNS_INFO_TIMEOUT_MS)
            if info is None:
                log.debug(f"No service info for {name}")
                continue
            yield name, _txt_fields(info.properties)
    finally:
        browser.cancel()
        zc.close()
        log.debug("End of mDNS lookup")


def _txt_fields(properties: dict) -> list[str]:
    fields = []
    for key, value in properties.items():
        k = key.decode("utf-8", "replace") if isinstance(key, bytes) else str(key)
        if value is None:
            fields.append(k)
            continue
        v = value.decode("utf-8", "replace") if isinstance(value, bytes) else str(value)
        fields.append(f"{k}={v}")
    return fields
