"""Unit tests for the Freebox HTTP transport and API client

Tests:
- API envelope decoding and error classification
- API version negotiation and URL building
- Category readers and their sub-request fan-out
"""
from unittest.mock import MagicMock

import pytest
import requests

from conftest import BASE_URL, FakeHttpClient
from freebox_client import AUTH_HEADER, FreeboxApi, FreeboxClient, HttpClient, query_api_version
from freebox_client_exceptions import (
    ApiVersionException,
    AuthRequiredException,
    FreeboxApiException,
    InvalidTokenException,
)
from freebox_models import ApiVersion


def make_response(json_data=None, status_code=200, text=None):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.text = text if text is not None else str(json_data)
    if json_data is None:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = json_data
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return response


def make_http(response):
    session = MagicMock(spec=requests.Session)
    session.get.return_value = response
    session.post.return_value = response
    return HttpClient(session=session), session


class TestHttpClient:
    """Test the API envelope handling"""

    def test_success_returns_result(self):
        http, session = make_http(make_response({"success": True, "result": {"uptime_val": 42}}))

        assert http.get(BASE_URL + "system/") == {"uptime_val": 42}
        session.get.assert_called_once()
        assert session.get.call_args[0][0] == BASE_URL + "system/"

    def test_success_without_result(self):
        http, _ = make_http(make_response({"success": True}))

        assert http.post(BASE_URL + "login/logout/") is None

    def test_post_sends_json_and_headers(self):
        http, session = make_http(make_response({"success": True, "result": {}}))

        http.post(BASE_URL + "login/session/", {"app_id": "x"}, headers={AUTH_HEADER: "token"})

        kwargs = session.post.call_args[1]
        assert kwargs["json"] == {"app_id": "x"}
        assert kwargs["headers"][AUTH_HEADER] == "token"
        assert "User-Agent" in kwargs["headers"]

    def test_auth_required(self):
        http, _ = make_http(make_response(
            {"success": False, "error_code": "auth_required", "msg": "Il faut s'authentifier"}))

        with pytest.raises(AuthRequiredException) as exc_info:
            http.get(BASE_URL + "system/")
        assert exc_info.value.error_code == "auth_required"
        assert exc_info.value.method == "GET"

    def test_invalid_token(self):
        http, _ = make_http(make_response({"success": False, "error_code": "invalid_token"}))

        with pytest.raises(InvalidTokenException):
            http.get(BASE_URL + "system/")

    def test_other_error_code(self):
        http, _ = make_http(make_response({"success": False, "error_code": "nodev", "msg": "Invalid port"}))

        with pytest.raises(FreeboxApiException) as exc_info:
            http.get(BASE_URL + "switch/port/9/stats/")
        assert not isinstance(exc_info.value, (AuthRequiredException, InvalidTokenException))
        assert "nodev" in str(exc_info.value)
        assert "Invalid port" in str(exc_info.value)

    def test_missing_success_field_is_failure(self):
        http, _ = make_http(make_response({"result": {}}))

        with pytest.raises(FreeboxApiException):
            http.get(BASE_URL + "system/")

    def test_non_json_http_error(self):
        http, _ = make_http(make_response(None, status_code=502, text="<html>Bad gateway</html>"))

        with pytest.raises(requests.HTTPError):
            http.get(BASE_URL + "system/")

    def test_non_json_ok(self):
        http, _ = make_http(make_response(None, status_code=200, text="hello"))

        with pytest.raises(FreeboxApiException, match="not JSON"):
            http.get(BASE_URL + "system/")

    def test_tls_verification(self):
        session = MagicMock(spec=requests.Session)
        HttpClient(session=session, ca_file="/etc/freebox/ca.pem")
        assert session.verify == "/etc/freebox/ca.pem"

        session = MagicMock(spec=requests.Session)
        HttpClient(session=session)
        assert session.verify is False


class TestApiVersion:
    """Test the API version negotiation"""

    def version(self, advertised):
        return ApiVersion(api_domain="abcdefgh.fbxos.fr", uid="uid", https_available=True, https_port=12345,
                          device_name="Freebox Server", api_version=advertised, api_base_url="/api/",
                          device_type="FreeboxServer7,1")

    def test_advertised_major(self):
        assert query_api_version(self.version("10.2")) == 10

    def test_leading_v(self):
        assert query_api_version(self.version("v8.0")) == 8

    def test_force_lower_version(self):
        assert query_api_version(self.version("10.2"), 8) == 8

    def test_force_higher_version(self):
        with pytest.raises(ApiVersionException):
            query_api_version(self.version("10.2"), 11)

    @pytest.mark.parametrize("advertised", ["10", "10.2.1", "", "x.2"])
    def test_malformed(self, advertised):
        with pytest.raises(ApiVersionException):
            query_api_version(self.version(advertised))

    def test_zero_major(self):
        with pytest.raises(ApiVersionException):
            query_api_version(self.version("0.5"))

    def test_get_url(self, api):
        assert api.get_url("system/") == BASE_URL + "system/"
        assert api.get_url("switch/port/%d/stats/", 3) == BASE_URL + "switch/port/3/stats/"
        assert api.get_url("") == BASE_URL
        assert api.version == "10.2"

    def test_get_url_invalid_api(self):
        api = FreeboxApi(ApiVersion(), 10)
        with pytest.raises(ApiVersionException):
            api.get_url("system/")


class TestFreeboxClient:
    """Test the typed category readers"""

    def test_get_system(self, api):
        http = FakeHttpClient({BASE_URL + "system/": {
            "firmware_version": "4.7.3",
            "mac": "F4:CA:E5:00:00:01",
            "uptime_val": 123456,
            "sensors": [{"id": "temp_cpu0", "name": "Température CPU 0", "value": 62}],
            "fans": [{"id": "fan0_speed", "name": "Ventilateur 1", "value": 2450}],
        }})

        info = FreeboxClient(http, api).get_system()

        assert info.firmware_version == "4.7.3"
        assert info.uptime_val == 123456
        assert info.sensors[0].id == "temp_cpu0"
        assert info.sensors[0].value == 62
        assert info.fans[0].value == 2450
        assert info.temp_cpum is None

    def test_get_connection_xdsl(self, api):
        http = FakeHttpClient({
            BASE_URL + "connection/": {"state": "up", "media": "xdsl", "bytes_up": 10},
            BASE_URL + "connection/xdsl/": {
                "status": {"status": "showtime", "protocol": "vdsl2", "modulation": "vdsl", "uptime": 100},
                "down": {"rate": 80000, "snr_10": 65},
            },
        })

        cnx = FreeboxClient(http, api).get_connection()

        assert cnx.xdsl.status.status == "showtime"
        assert cnx.xdsl.down.snr_10 == 65
        assert cnx.xdsl.up is None
        assert cnx.ftth is None

    def test_get_connection_ethernet_has_no_sub_request(self, api):
        http = FakeHttpClient({BASE_URL + "connection/": {"state": "up", "media": "ethernet"}})

        cnx = FreeboxClient(http, api).get_connection()

        assert cnx.xdsl is None and cnx.ftth is None
        assert len(http.calls) == 1

    def test_get_connection_sub_request_failure(self, api):
        http = FakeHttpClient({
            BASE_URL + "connection/": {"state": "up", "media": "ftth"},
            BASE_URL + "connection/ftth/": FreeboxApiException("GET", BASE_URL + "connection/ftth/", "internal_error"),
        })

        with pytest.raises(FreeboxApiException):
            FreeboxClient(http, api).get_connection()

    def test_get_switch_port_stats_failure(self, api):
        http = FakeHttpClient({
            BASE_URL + "switch/status/": [
                {"id": 1, "link": "up", "speed": "1000", "duplex": "full", "mac_list": [{"mac": "AA:BB"}]},
                {"id": 2, "link": "down", "speed": "10", "duplex": "half"},
                {"id": 3, "link": "up", "speed": "100", "duplex": "full"},
            ],
            BASE_URL + "switch/port/1/stats/": {"rx_good_bytes": 100, "tx_bytes": 200},
            BASE_URL + "switch/port/2/stats/": FreeboxApiException("GET", BASE_URL + "switch/port/2/stats/", "nodev"),
            BASE_URL + "switch/port/3/stats/": {"rx_good_bytes": 300},
        })

        info = FreeboxClient(http, api).get_switch()

        assert [p.id for p in info.ports] == [1, 2, 3]
        assert info.ports[0].stats.tx_bytes == 200
        assert info.ports[1].stats is None
        assert info.ports[2].stats.rx_good_bytes == 300
        assert info.ports[0].mac_list[0].mac == "AA:BB"
        assert info.ports[0].speed_mbps == 1000

    def test_get_wifi_joins_stations(self, api):
        http = FakeHttpClient({
            BASE_URL + "wifi/bss/": [
                {"id": "F4:CA:E5:00:00:02", "phy_id": 0,
                 "status": {"state": "active", "sta_count": 1},
                 "config": {"ssid": "Freebox-1234", "encryption": "wpa2_psk_ccmp", "enabled": True}},
            ],
            BASE_URL + "wifi/ap/": [
                {"id": 0, "name": "5G", "status": {"state": "active", "primary_channel": 36},
                 "config": {"band": "5g"}, "capabilities": {"5g": {"vht": True}}},
            ],
            BASE_URL + "wifi/ap/0/stations/": [
                {"id": "AA:00", "mac": "AA:00", "bssid": "f4:ca:e5:00:00:02", "host": {"active": True}},
                {"id": "BB:00", "mac": "BB:00", "bssid": "00:00:00:00:00:00"},
            ],
        })

        wifi = FreeboxClient(http, api).get_wifi()

        stations = wifi.ap[0].stations
        assert stations[0].bss is wifi.bss[0]
        assert stations[0].active is True
        assert stations[1].bss is None
        assert stations[1].active is None
        assert wifi.ap[0].band_capabilities == {"vht": True}

    def test_get_wifi_ap_failure_fails_category(self, api):
        http = FakeHttpClient({
            BASE_URL + "wifi/bss/": [{"id": "F4:CA:E5:00:00:02"}],
            BASE_URL + "wifi/ap/": requests.ConnectionError("reset"),
        })

        with pytest.raises(requests.ConnectionError):
            FreeboxClient(http, api).get_wifi()

    def test_get_wifi_bss_failure_keeps_aps_and_stations(self, api):
        http = FakeHttpClient({
            BASE_URL + "wifi/bss/": FreeboxApiException("GET", BASE_URL + "wifi/bss/", "internal_error"),
            BASE_URL + "wifi/ap/": [{"id": 0, "name": "5G", "config": {"band": "5g"}}],
            BASE_URL + "wifi/ap/0/stations/": [
                {"id": "AA:00", "mac": "AA:00", "bssid": "f4:ca:e5:00:00:02", "host": {"active": True}},
            ],
        })

        wifi = FreeboxClient(http, api).get_wifi()

        assert wifi.bss == []
        assert wifi.ap[0].name == "5G"
        station = wifi.ap[0].stations[0]
        assert station.id == "AA:00"
        assert station.bss is None

    def test_get_wifi_station_failure(self, api):
        http = FakeHttpClient({
            BASE_URL + "wifi/bss/": [],
            BASE_URL + "wifi/ap/": [{"id": 0}, {"id": 1}],
            BASE_URL + "wifi/ap/0/stations/": [{"id": "AA:00"}],
            BASE_URL + "wifi/ap/1/stations/": FreeboxApiException("GET", BASE_URL + "wifi/ap/1/stations/", "busy"),
        })

        wifi = FreeboxClient(http, api).get_wifi()

        assert len(wifi.ap[0].stations) == 1
        assert wifi.ap[1].stations is None

    def test_get_lan_interface_failure(self, api):
        http = FakeHttpClient({
            BASE_URL + "lan/browser/interfaces/": [{"name": "pub", "host_count": 2}, {"name": "wifiguest"}],
            BASE_URL + "lan/browser/pub/": [
                {"id": "ether-aa", "primary_name": "nas", "active": True,
                 "l2ident": {"type": "mac_address", "id": "AA:BB:CC:DD:EE:FF"},
                 "l3connectivities": [{"addr": "192.168.1.10", "af": "ipv4", "active": True}]},
            ],
            BASE_URL + "lan/browser/wifiguest/": requests.Timeout("timeout"),
        })

        lan = FreeboxClient(http, api).get_lan()

        assert list(lan.hosts) == ["pub"]
        host = lan.hosts["pub"][0]
        assert host.l2_id == "AA:BB:CC:DD:EE:FF"
        assert host.l3_connectivities[0].addr == "192.168.1.10"
