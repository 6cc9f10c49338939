from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import requests
import urllib3

from freebox_client_exceptions import *
from freebox_models import *
from freebox_utils import *

FREEBOX_CLIENT_DEFAULT_HEADERS = {
    "User-Agent": "freebox-prometheus-exporter"
}

DEFAULT_TIMEOUT = 10
AUTH_HEADER = "X-Fbx-App-Auth"

logger = logging.getLogger(__name__)


class ApiClient(Protocol):
    """Anything able to GET/POST a Freebox API URL and return the envelope result."""

    def get(self, url: str, headers: Optional[dict[str, str]] = None) -> Any: ...

    def post(self, url: str, payload: Any = None, headers: Optional[dict[str, str]] = None) -> Any: ...


class HttpClient:
    """HTTPS transport over one shared requests.Session, decoding the API envelope."""

    _ERRORS = {
        AuthRequiredException.ERROR_CODE: AuthRequiredException,
        InvalidTokenException.ERROR_CODE: InvalidTokenException,
    }

    def __init__(self, session: Optional[requests.Session] = None, ca_file: Optional[str] = None,
                 timeout: float = DEFAULT_TIMEOUT, logger: Optional[logging.Logger] = None):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        if ca_file:
            self.session.verify = ca_file
        else:
            self.logger.warning("No CA file given: the Freebox TLS certificate will not be verified")
            self.session.verify = False
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def fetch_json(self, url: str) -> Any:
        """Plain GET without envelope (used by the discovery endpoint)."""
        self.logger.debug(f"HTTP request: GET {url}")
        response = self.session.get(url, headers=FREEBOX_CLIENT_DEFAULT_HEADERS, timeout=self.timeout)
        response.raise_for_status()
        self.logger.debug(f"HTTP result: {response.text}")
        return response.json()

    def get(self, url: str, headers: Optional[dict[str, str]] = None) -> Any:
        self.logger.debug(f"HTTP request: GET {url}")
        response = self.session.get(url,
                                    headers={**FREEBOX_CLIENT_DEFAULT_HEADERS, **(headers or {})},
                                    timeout=self.timeout)
        return self.__handle_response("GET", url, response)

    def post(self, url: str, payload: Any = None, headers: Optional[dict[str, str]] = None) -> Any:
        self.logger.debug(f"HTTP request: POST {url}")
        response = self.session.post(url,
                                     json=payload,
                                     headers={**FREEBOX_CLIENT_DEFAULT_HEADERS, **(headers or {})},
                                     timeout=self.timeout)
        return self.__handle_response("POST", url, response)

    def __handle_response(self, method: str, url: str, response: requests.Response) -> Any:
        self.logger.debug(f"HTTP result: {response.text}")
        try:
            data = response.json()
        except ValueError:
            response.raise_for_status()
            raise FreeboxApiException(method, url, message="response is not JSON")
        if not isinstance(data, dict):
            raise FreeboxApiException(method, url, message="unexpected response envelope")

        if not data.get("success", False):
            error_code = data.get("error_code")
            exc_type = self._ERRORS.get(error_code, FreeboxApiException)
            raise exc_type(method, url, error_code, data.get("msg"))
        return data.get("result")

    def close(self):
        self.session.close()


def query_api_version(api_version: ApiVersion, force_api_version: int = 0) -> int:
    """
    Resolve the integer API version to query.

    The advertised version "<major>.<minor>" gives the major version; a
    positive force_api_version is used instead as long as it does not exceed it.
    """
    advertised = api_version.api_version
    version_split = advertised.lstrip("v").split(".")
    if len(version_split) != 2:
        raise ApiVersionException(f'could not decode the api version "{advertised}"')
    try:
        major = int(version_split[0])
    except ValueError:
        raise ApiVersionException(f'could not decode the api version "{advertised}"') from None

    if force_api_version > major:
        raise ApiVersionException(
            f"could not use the api version {force_api_version} which is higher than {major}")
    if force_api_version > 0:
        return force_api_version
    if major <= 0:
        raise ApiVersionException(f'invalid api version "{advertised}"')
    return major


class FreeboxApi:
    """An ApiVersion together with the version to query, able to build URLs."""

    def __init__(self, api_version: ApiVersion, query_version: int):
        self.api_version = api_version
        self.query_version = query_version

    @classmethod
    def negotiate(cls, api_version: ApiVersion, force_api_version: int = 0) -> FreeboxApi:
        api = cls(api_version, query_api_version(api_version, force_api_version))
        if not api.is_valid():
            raise ApiVersionException("could not get the API version")
        logger.debug(f"API version {api_version.api_version}, querying v{api.query_version}")
        return api

    def is_valid(self) -> bool:
        return self.api_version.is_valid() and self.query_version > 0

    @property
    def version(self) -> str:
        return self.api_version.api_version

    def get_url(self, path: str, *args) -> str:
        if not self.is_valid():
            raise ApiVersionException("invalid API version")
        a = self.api_version
        if args:
            path = path % args
        return f"https://{a.api_domain}:{a.https_port}{a.api_base_url}v{self.query_version}/{path}"


class FreeboxClient:
    """Typed readers for the metric endpoints, fanning out sub-requests concurrently."""

    def __init__(self, session: ApiClient, api: FreeboxApi,
                 max_workers: int = DEFAULT_MAX_WORKERS, logger: Optional[logging.Logger] = None):
        self.session = session
        self.api = api
        self.max_workers = max_workers
        self.logger = logger or logging.getLogger(__name__)

    def __get(self, path: str, *args) -> Any:
        return self.session.get(self.api.get_url(path, *args))

    def get_system(self) -> SystemInfo:
        return SystemInfo.from_dict(self.__get("system/") or {})

    def get_connection(self) -> ConnectionInfo:
        connection = ConnectionInfo.from_dict(self.__get("connection/") or {})
        if connection.media == ConnectionMedia.XDSL.value:
            connection.xdsl = XdslInfo.from_dict(self.__get("connection/xdsl/") or {})
        elif connection.media == ConnectionMedia.FTTH.value:
            connection.ftth = FtthInfo.from_dict(self.__get("connection/ftth/") or {})
        return connection

    def get_switch(self) -> SwitchInfo:
        ports = [SwitchPort.from_dict(p) for p in self.__get("switch/status/") or []]

        results = run_concurrently({
            port.id: (lambda pid=port.id: SwitchPortStats.from_dict(self.__get("switch/port/%d/stats/", pid) or {}))
            for port in ports
        }, self.max_workers)

        for port in ports:
            stats = results.get(port.id)
            if isinstance(stats, Exception):
                self.logger.warning(f"Switch port {port.id} stats collection failed: {stats}")
                continue
            port.stats = stats
        return SwitchInfo(ports=ports)

    def get_wifi(self) -> WifiInfo:
        top = run_concurrently({
            "bss": lambda: [WifiBss.from_dict(b) for b in self.__get("wifi/bss/") or []],
            "ap": lambda: [WifiAp.from_dict(a) for a in self.__get("wifi/ap/") or []],
        }, self.max_workers)
        if isinstance(top["ap"], Exception):
            raise top["ap"]
        bss = top["bss"]
        if isinstance(bss, Exception):
            # BSS only enrich the station labels
            self.logger.warning(f"Wifi BSS collection failed: {bss}")
            bss = []
        wifi = WifiInfo(bss=bss, ap=top["ap"])

        stations = run_concurrently({
            ap.id: (lambda aid=ap.id: [WifiStation.from_dict(s) for s in self.__get("wifi/ap/%d/stations/", aid) or []])
            for ap in wifi.ap
        }, self.max_workers)
        for ap in wifi.ap:
            result = stations.get(ap.id)
            if isinstance(result, Exception):
                self.logger.warning(f"Wifi AP {ap.id} stations collection failed: {result}")
                continue
            ap.stations = result

        wifi.join_stations()
        return wifi

    def get_lan(self) -> LanInfo:
        interfaces = [
            LanInterface(name=opt_str(i.get("name")))
            for i in self.__get("lan/browser/interfaces/") or []
        ]

        results = run_concurrently({
            iface.name: (lambda name=iface.name: [LanHost.from_dict(h) for h in self.__get("lan/browser/%s/", name) or []])
            for iface in interfaces
        }, self.max_workers)

        hosts: dict[str, list[LanHost]] = {}
        for name, result in results.items():
            if isinstance(result, Exception):
                self.logger.warning(f"LAN interface {name} hosts collection failed: {result}")
                continue
            hosts[name] = result
        return LanInfo(hosts=hosts)
