#!/usr/bin/env python3
"""
Prometheus exporter for Freebox metrics.

This module exports metrics from a Freebox via the Prometheus format.
Every scrape queries the Freebox API (system, connection, switch, wifi and lan)
in parallel and builds the samples from whatever categories answered.
"""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
import threading
from typing import Callable, Optional

import requests
from prometheus_client import CollectorRegistry, Counter, Histogram, start_http_server

import freebox_client
from freebox_client_exceptions import (
    ApiVersionException,
    AuthorizationException,
    ConfigException,
    DiscoveryException,
    FreeboxApiException,
    FreeboxException,
)
from freebox_config import FreeboxConfig, load_config, save_config
from freebox_discovery import discover
from freebox_models import (
    ApiVersion,
    ConnectionInfo,
    DiscoveryStrategy,
    LanInfo,
    SwitchInfo,
    SystemInfo,
    WifiInfo,
    XdslStats,
)
from freebox_prometheus_utils import (
    COUNTER,
    MetricDesc,
    SampleSet,
    b,
    collect_bool,
    collect_counter,
    collect_gauge,
    to_label,
)
from freebox_session import FreeboxSession, default_identity, request_authorization
from freebox_utils import lower, run_concurrently

METRIC_PREFIX = "freebox_"

EXIT_CONFIG_ERROR = 2
EXIT_NETWORK_ERROR = 3
EXIT_AUTHORIZATION_ERROR = 4

logger = logging.getLogger(__name__)

# Metrics Registry
registry = CollectorRegistry()

# Scrape duration and errors
scrape_duration_seconds = Histogram(
    METRIC_PREFIX + "exporter_scrape_duration_seconds",
    "Time spent scraping the Freebox",
    registry=registry,
)

scrape_errors_total = Counter(
    METRIC_PREFIX + "exporter_scrape_errors_total",
    "Total number of failed category collections",
    ["category"],
    registry=registry,
)


def _desc(name: str, documentation: str, labels=(), type_: str = "gauge") -> MetricDesc:
    return MetricDesc(METRIC_PREFIX + name, documentation, tuple(labels), type_)


exporter_info = _desc("exporter_info",
                      "constant metric, 1 if every category was collected. Information about the exporter",
                      ["url", "api_version"])
info = _desc("info",
             "constant metric with value=1. Various information about the Freebox",
             ["firmware", "mac", "serial", "boardname", "box_flavor", "connection_type", "connection_state",
              "connection_media", "ipv4", "ipv6"])

system = {
    "uptime": _desc("system_uptime", "freebox uptime (in seconds)", type_=COUNTER),
    "temp": _desc("system_temp_degrees", "temperature (°C)", ["id"]),
    "fan_rpm": _desc("system_fan_rpm", "fan rpm", ["id"]),
}

connection = {
    "bandwidth": _desc("connection_bandwidth_bytes", "available upload/download bandwidth in bytes/s", ["dir"]),
    "rate": _desc("connection_rate_bytes", "current upload/download rate in bytes/s", ["dir"]),
    "bytes": _desc("connection_bytes", "total uploaded/downloaded bytes since last connection", ["dir"], COUNTER),
    "xdsl_info": _desc("connection_xdsl_info",
                       "constant metric with value=1. Various information about the XDSL connection",
                       ["status", "protocol", "modulation"]),
    "xdsl_uptime": _desc("connection_xdsl_uptime", "uptime in seconds", type_=COUNTER),
    "xdsl_maxrate": _desc("connection_xdsl_maxrate_bytes", "ATM max rate in bytes/s", ["dir"]),
    "xdsl_rate": _desc("connection_xdsl_rate_bytes", "ATM rate in bytes/s", ["dir"]),
    "xdsl_snr": _desc("connection_xdsl_snr_db", "signal/noise ratio in dB", ["dir"]),
    "xdsl_attn": _desc("connection_xdsl_attn_db", "attenuation in dB", ["dir"]),
    "xdsl_errors": _desc("connection_xdsl_errors",
                         "error counters: fec, crc, hec, es (errored seconds), ses (severely errored seconds)",
                         ["dir", "type"], COUNTER),
}

_SFP_LABELS = ["sfp_serial", "sfp_model", "sfp_vendor"]
ftth = {
    "sfp_present": _desc("connection_ftth_sfp_present", "value=1 if the SFP is present", _SFP_LABELS),
    "sfp_alim_ok": _desc("connection_ftth_sfp_alim_ok", "value=1 if the SFP's alimentation is OK", _SFP_LABELS),
    "sfp_has_power_report": _desc("connection_ftth_sfp_has_power_report",
                                  "value=1 if the SFP has a power report", _SFP_LABELS),
    "sfp_has_signal": _desc("connection_ftth_sfp_has_signal", "value=1 if the SFP has a signal", _SFP_LABELS),
    "link": _desc("connection_ftth_link", "value=1 if the link is OK", _SFP_LABELS),
    "sfp_pwr": _desc("connection_ftth_sfp_pwr_dbm", "SFP power report in dBm", _SFP_LABELS + ["dir"]),
}

switch = {
    "port_connected_total": _desc("switch_port_connected_total", "number of ports connected"),
    "port_bandwidth": _desc("switch_port_bandwidth_bytes", "port link speed in bytes/s", ["id", "link", "duplex"]),
    "port_rate": _desc("switch_port_rate_bytes", "current port rx/tx rate in bytes/s", ["id", "dir"]),
    "port_bytes": _desc("switch_port_bytes", "total rx/tx bytes", ["id", "dir", "state"], COUNTER),
    "port_packets": _desc("switch_port_packets", "total rx/tx packets", ["id", "dir", "state"], COUNTER),
    "host_total": _desc("switch_host_total", "number of hosts connected to the switch", ["id"]),
    "host": _desc("switch_host", "constant metric with value=1. List of MAC addresses connected to the switch",
                  ["id", "mac", "hostname"]),
}

wifi = {
    "bss_info": _desc("wifi_bss_info", "constant metric with value=1. Various information about the BSS",
                      ["bssid", "ap_id", "state", "enabled", "ssid", "hide_ssid", "encryption", "eapol_version"]),
    "bss_station_total": _desc("wifi_bss_station_total", "number of stations on this BSS", ["bssid", "ap_id"]),
    "bss_authorized_station_total": _desc("wifi_bss_authorized_station_total",
                                          "number of stations authorized on this BSS", ["bssid", "ap_id"]),
    "ap_info": _desc("wifi_ap_info", "constant metric with value=1. List of AP capabilities"),
    "channel": _desc("wifi_channel", "channel number used by the AP",
                     ["ap_id", "ap_band", "ap_name", "channel_type"]),
    "station_total": _desc("wifi_station_total", "number of stations connected to the AP",
                           ["ap_id", "ap_band", "ap_name"]),
    "station_info": _desc("wifi_station_info", "1 if active, 0 if not",
                          ["ap_id", "ap_band", "ap_name", "id", "bssid", "ssid", "encryption", "hostname", "mac"]),
    "station_bytes": _desc("wifi_station_bytes", "total rx/tx bytes", ["id", "dir"], COUNTER),
    "station_signal": _desc("wifi_station_signal_dbm", "signal attenuation in dBm", ["id"]),
}

lan = {
    "host_total": _desc("lan_host_total", "number of hosts detected", ["interface", "active"]),
    "host_active_l2": _desc("lan_host_active_l2",
                            "1 if active, 0 if not. Various information about the l2 addresses",
                            ["interface", "vendor_name", "primary_name", "host_type", "l2_type", "l2_id"]),
    "host_active_l3": _desc("lan_host_active_l3",
                            "1 if active, 0 if not. Various information about the l3 addresses",
                            ["interface", "vendor_name", "primary_name", "host_type", "l2_type", "l2_id",
                             "l3_type", "l3_address"]),
}


class FreeboxCollector:
    """Custom collector: every collect() call is one scrape of the Freebox."""

    CATEGORIES = ("system", "connection", "switch", "wifi", "lan")

    def __init__(self, client: freebox_client.FreeboxClient, host_details: bool = False,
                 logger: Optional[logging.Logger] = None):
        self.client = client
        self.host_details = host_details
        self.logger = logger or logging.getLogger(__name__)

    def collect(self):
        yield from self.scrape()

    def scrape(self) -> list:
        """Collect all categories in parallel and return the sorted metric families."""
        with scrape_duration_seconds.time():
            samples = SampleSet()
            fetchers: dict[str, Callable] = {
                "system": self.client.get_system,
                "connection": self.client.get_connection,
                "switch": self.client.get_switch,
                "wifi": self.client.get_wifi,
                "lan": self.client.get_lan,
            }
            results = run_concurrently({
                category: (lambda c=category: self._collect_category(c, fetchers[c], samples))
                for category in self.CATEGORIES
            }, len(self.CATEGORIES))

            successful = True
            for category in self.CATEGORIES:
                result = results.get(category)
                if isinstance(result, Exception):
                    successful = False
                    scrape_errors_total.labels(category=category).inc()
                    self.logger.warning(f"{category.capitalize()} collection failed: {result}")

            self._collect_info(samples, results, successful)
            return samples.families()

    def _collect_category(self, category: str, fetch: Callable, samples: SampleSet):
        self.logger.debug(f"Collect {category}")
        data = fetch()
        getattr(self, f"_collect_{category}")(samples, data)
        return data

    def _collect_info(self, samples: SampleSet, results: dict, successful: bool):
        api = self.client.api
        samples.add(exporter_info, b(successful), api.get_url(""), api.version)

        sys_info = results.get("system")
        if isinstance(sys_info, Exception):
            sys_info = None
        cnx = results.get("connection")
        if isinstance(cnx, Exception):
            cnx = None

        samples.add(info, 1,
                    sys_info.firmware_version if sys_info else "",
                    lower(sys_info.mac) if sys_info else "",
                    sys_info.serial if sys_info else "",
                    sys_info.board_name if sys_info else "",
                    sys_info.box_flavor if sys_info else "",
                    cnx.type if cnx else "",
                    cnx.state if cnx else "",
                    cnx.media if cnx else "",
                    cnx.ipv4 if cnx else "",
                    cnx.ipv6 if cnx else "")

    def _collect_system(self, samples: SampleSet, m: SystemInfo):
        collect_counter(samples, system["uptime"], m.uptime_val)
        for sensor in m.sensors:
            collect_gauge(samples, system["temp"], sensor.value, sensor.id)
        if not m.sensors:
            collect_gauge(samples, system["temp"], m.temp_cpum, "temp_cpum")
            collect_gauge(samples, system["temp"], m.temp_cpub, "temp_cpub")
            collect_gauge(samples, system["temp"], m.temp_sw, "temp_sw")
        for fan in m.fans:
            collect_gauge(samples, system["fan_rpm"], fan.value, fan.id)
        if not m.fans:
            collect_gauge(samples, system["fan_rpm"], m.fan_rpm, "fan")

    def _collect_connection(self, samples: SampleSet, m: ConnectionInfo):
        collect_gauge(samples, connection["bandwidth"], m.bandwidth_up, "tx", factor=1 / 8)
        collect_gauge(samples, connection["bandwidth"], m.bandwidth_down, "rx", factor=1 / 8)
        collect_gauge(samples, connection["rate"], m.rate_up, "tx")
        collect_gauge(samples, connection["rate"], m.rate_down, "rx")
        collect_counter(samples, connection["bytes"], m.bytes_up, "tx")
        collect_counter(samples, connection["bytes"], m.bytes_down, "rx")

        if m.xdsl is not None:
            status = m.xdsl.status
            if status is not None:
                samples.add(connection["xdsl_info"], 1, status.status, status.protocol, status.modulation)
                collect_counter(samples, connection["xdsl_uptime"], status.uptime)
            self._collect_xdsl_stats(samples, m.xdsl.up, "tx")
            self._collect_xdsl_stats(samples, m.xdsl.down, "rx")

        if m.ftth is not None:
            f = m.ftth
            sfp = (f.sfp_serial, f.sfp_model, f.sfp_vendor)
            collect_bool(samples, ftth["sfp_present"], f.sfp_present, *sfp)
            collect_bool(samples, ftth["sfp_alim_ok"], f.sfp_alim_ok, *sfp)
            collect_bool(samples, ftth["sfp_has_power_report"], f.sfp_has_power_report, *sfp)
            collect_bool(samples, ftth["sfp_has_signal"], f.sfp_has_signal, *sfp)
            collect_bool(samples, ftth["link"], f.link, *sfp)
            collect_gauge(samples, ftth["sfp_pwr"], f.sfp_pwr_tx, *sfp, "tx", factor=0.01)
            collect_gauge(samples, ftth["sfp_pwr"], f.sfp_pwr_rx, *sfp, "rx", factor=0.01)

    @staticmethod
    def _collect_xdsl_stats(samples: SampleSet, stats: Optional[XdslStats], direction: str):
        if stats is None:
            return
        # kbit/s -> bytes/s
        collect_gauge(samples, connection["xdsl_maxrate"], stats.maxrate, direction, factor=1000 / 8)
        collect_gauge(samples, connection["xdsl_rate"], stats.rate, direction, factor=1000 / 8)
        if stats.snr_10 is not None:
            collect_gauge(samples, connection["xdsl_snr"], stats.snr_10, direction, factor=0.1)
        else:
            collect_gauge(samples, connection["xdsl_snr"], stats.snr, direction)
        if stats.attn_10 is not None:
            collect_gauge(samples, connection["xdsl_attn"], stats.attn_10, direction, factor=0.1)
        else:
            collect_gauge(samples, connection["xdsl_attn"], stats.attn, direction)
        for error_type in ("fec", "crc", "hec", "es", "ses"):
            collect_counter(samples, connection["xdsl_errors"], getattr(stats, error_type), direction, error_type)

    def _collect_switch(self, samples: SampleSet, m: SwitchInfo):
        ports_connected = 0
        for port in m.ports:
            if port.is_up:
                ports_connected += 1
            port_id = to_label(port.id)

            # Mbit/s -> bytes/s
            samples.add(switch["port_bandwidth"], port.speed_mbps * 1000000 / 8, port_id, port.link, port.duplex)

            stats = port.stats
            if stats is not None:
                collect_counter(samples, switch["port_bytes"], stats.rx_good_bytes, port_id, "rx", "good")
                collect_counter(samples, switch["port_bytes"], stats.rx_bad_bytes, port_id, "rx", "bad")
                collect_counter(samples, switch["port_bytes"], stats.tx_bytes, port_id, "tx", "")
                collect_counter(samples, switch["port_packets"], stats.rx_good_packets, port_id, "rx", "good")
                collect_counter(samples, switch["port_packets"], stats.rx_err_packets, port_id, "rx", "bad")
                collect_counter(samples, switch["port_packets"], stats.tx_packets, port_id, "tx", "")
                collect_gauge(samples, switch["port_rate"], stats.rx_bytes_rate, port_id, "rx")
                collect_gauge(samples, switch["port_rate"], stats.tx_bytes_rate, port_id, "tx")

            samples.add(switch["host_total"], len(port.mac_list), port_id)
            if self.host_details:
                for host in port.mac_list:
                    samples.add(switch["host"], 1, port_id, lower(host.mac), host.hostname)

        samples.add(switch["port_connected_total"], ports_connected)

    def _collect_wifi(self, samples: SampleSet, m: WifiInfo):
        for bss in m.bss:
            bssid = lower(bss.id)
            phy_id = to_label(bss.phy_id)
            samples.add(wifi["bss_info"], 1,
                        bssid,
                        phy_id,
                        bss.state,
                        to_label(bss.enabled),
                        bss.ssid,
                        to_label(bss.hide_ssid),
                        bss.encryption,
                        to_label(bss.eapol_version))
            collect_gauge(samples, wifi["bss_station_total"], bss.sta_count, bssid, phy_id)
            collect_gauge(samples, wifi["bss_authorized_station_total"], bss.authorized_sta_count, bssid, phy_id)

        for ap in m.ap:
            ap_id = to_label(ap.id)
            capabilities = ap.band_capabilities
            if capabilities is not None:
                labels = {
                    "ap_id": ap_id,
                    "ap_band": ap.band,
                    "ap_name": ap.name,
                    "ap_state": ap.state,
                }
                for k, v in capabilities.items():
                    labels.setdefault(k, to_label(v))
                samples.add_with_labels(wifi["ap_info"], labels, 1)

            collect_gauge(samples, wifi["channel"], ap.primary_channel, ap_id, ap.band, ap.name, "primary")
            collect_gauge(samples, wifi["channel"], ap.secondary_channel, ap_id, ap.band, ap.name, "secondary")

            if ap.stations is None:
                continue
            samples.add(wifi["station_total"], len(ap.stations), ap_id, ap.band, ap.name)
            if not self.host_details:
                continue
            for station in ap.stations:
                station_id = lower(station.id)
                ssid = station.bss.ssid if station.bss is not None else ""
                encryption = station.bss.encryption if station.bss is not None else ""
                samples.add(wifi["station_info"], b(station.active),
                            ap_id,
                            ap.band,
                            ap.name,
                            station_id,
                            lower(station.bssid),
                            ssid,
                            encryption,
                            station.hostname,
                            lower(station.mac))
                collect_counter(samples, wifi["station_bytes"], station.rx_bytes, station_id, "rx")
                collect_counter(samples, wifi["station_bytes"], station.tx_bytes, station_id, "tx")
                collect_gauge(samples, wifi["station_signal"], station.signal, station_id)

    def _collect_lan(self, samples: SampleSet, m: LanInfo):
        for name, hosts in m.hosts.items():
            hosts_active = 0
            hosts_inactive = 0
            hosts_unknown = 0

            for host in hosts:
                if host.active is None:
                    hosts_unknown += 1
                elif host.active:
                    hosts_active += 1
                else:
                    hosts_inactive += 1

                if self.host_details:
                    l2_id = lower(host.l2_id)
                    samples.add(lan["host_active_l2"], b(host.active),
                                name, host.vendor_name, host.primary_name, host.host_type, host.l2_type, l2_id)
                    for l3 in host.l3_connectivities:
                        samples.add(lan["host_active_l3"], b(l3.active),
                                    name, host.vendor_name, host.primary_name, host.host_type, host.l2_type, l2_id,
                                    l3.af, l3.addr)

            samples.add(lan["host_total"], hosts_active, name, "true")
            samples.add(lan["host_total"], hosts_inactive, name, "false")
            if hosts_unknown > 0:
                samples.add(lan["host_total"], hosts_unknown, name, "unknown")


def parse_listen_address(listen: str) -> tuple[str, int]:
    """":9091" -> ("0.0.0.0", 9091), "127.0.0.1:9091" -> ("127.0.0.1", 9091)"""
    host, sep, port = listen.rpartition(":")
    if not sep:
        host, port = "", listen
    try:
        port_number = int(port)
    except ValueError:
        raise ConfigException(f"invalid listen address {listen!r}") from None
    return host.strip("[]") or "0.0.0.0", port_number


def create_session(config_path: str, discovery: DiscoveryStrategy, force_api_version: int,
                   http: freebox_client.HttpClient) -> tuple[FreeboxSession, freebox_client.FreeboxApi]:
    """
    Bootstrap: read or discover the API version, then pair if needed.

    Raises FreeboxException (or requests.RequestException) on any fatal error.
    """
    config = load_config(config_path)
    api_version: Optional[ApiVersion] = config.api if config and config.api.is_valid() else None
    if api_version is None:
        api_version = discover(discovery, http)

    api = freebox_client.FreeboxApi.negotiate(api_version, force_api_version)
    identity = default_identity()

    app_token = config.app_token if config else ""
    if not (config and config.is_usable() and config.api == api_version):
        if not app_token:
            app_token = request_authorization(http, api, identity)
        save_config(config_path, FreeboxConfig(api=api_version, app_token=app_token))

    return FreeboxSession(http, api, app_token, identity), api


def create_app(config_path: str, discovery: DiscoveryStrategy = DiscoveryStrategy.HTTP,
               force_api_version: int = 0, host_details: bool = False, listen: str = ":9091",
               ca_file: Optional[str] = None) -> Callable[[], int]:
    """
    Create and configure the Prometheus metrics exporter.

    Returns:
        Callable that starts the exporter and returns the process exit code
    """

    def app() -> int:
        http = freebox_client.HttpClient(ca_file=ca_file)
        try:
            addr, port = parse_listen_address(listen)
            session, api = create_session(config_path, discovery, force_api_version, http)
        except (ConfigException, ApiVersionException) as e:
            logger.error(f"Configuration error: {e}")
            return EXIT_CONFIG_ERROR
        except AuthorizationException as e:
            logger.error(f"Authorization failed: {e}. Remove {config_path} and pair the exporter again")
            return EXIT_AUTHORIZATION_ERROR
        except (DiscoveryException, FreeboxException, requests.RequestException) as e:
            logger.error(f"Could not connect to the Freebox: {e}")
            return EXIT_NETWORK_ERROR

        try:
            session.login()
        except FreeboxApiException as e:
            logger.error(f"Login failed: {e}. Remove {config_path} and pair the exporter again")
            return EXIT_AUTHORIZATION_ERROR
        except requests.RequestException as e:
            logger.error(f"Could not connect to the Freebox: {e}")
            return EXIT_NETWORK_ERROR

        client = freebox_client.FreeboxClient(session, api)
        registry.register(FreeboxCollector(client, host_details=host_details))

        stop = threading.Event()
        signal.signal(signal.SIGTERM, lambda signum, frame: stop.set())

        start_http_server(port, addr=addr, registry=registry)
        logger.info(f"Metrics available at http://{addr}:{port}/metrics")
        try:
            stop.wait()
        except KeyboardInterrupt:
            pass
        logger.info("Shutting down exporter")
        session.logout()
        http.close()
        return 0

    return app


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the Prometheus exporter."""
    # Read defaults from environment variables
    default_config = os.getenv("FREEBOX_CONFIG", "freebox-exporter.json")
    default_discovery = os.getenv("FREEBOX_DISCOVERY", DiscoveryStrategy.HTTP.value)
    default_api_version = int(os.getenv("FREEBOX_API_VERSION", "0"))
    default_host_details = os.getenv("FREEBOX_HOST_DETAILS", "").lower() in ("1", "true", "yes")
    default_listen = os.getenv("FREEBOX_LISTEN", ":9091")
    default_ca_file = os.getenv("FREEBOX_CA_FILE")
    default_log_level = os.getenv("FREEBOX_LOG_LEVEL", "INFO")

    parser = argparse.ArgumentParser(
        description="Prometheus exporter for Freebox metrics",
        epilog="Environment variables can be used as defaults: "
               "FREEBOX_CONFIG, FREEBOX_DISCOVERY, FREEBOX_API_VERSION, FREEBOX_HOST_DETAILS, "
               "FREEBOX_LISTEN, FREEBOX_CA_FILE, FREEBOX_LOG_LEVEL"
    )
    parser.add_argument(
        "--config",
        default=default_config,
        help="Configuration file holding the API version and the app token, "
             "created on first pairing (default: freebox-exporter.json) [env: FREEBOX_CONFIG]"
    )
    parser.add_argument(
        "--discovery",
        default=default_discovery,
        choices=[s.value for s in DiscoveryStrategy],
        help="How to find the Freebox: HTTP call to mafreebox.freebox.fr or mDNS (default: http) "
             "[env: FREEBOX_DISCOVERY]"
    )
    parser.add_argument(
        "--api-version",
        type=int,
        default=default_api_version,
        help="Force the API version to query, 0 for the one advertised by the Freebox "
             "[env: FREEBOX_API_VERSION]"
    )
    parser.add_argument(
        "--host-details",
        action="store_true",
        default=default_host_details,
        help="Export per host metrics (switch hosts, wifi stations, LAN hosts) [env: FREEBOX_HOST_DETAILS]"
    )
    parser.add_argument(
        "--listen",
        default=default_listen,
        help="Address to expose Prometheus metrics on (default: :9091) [env: FREEBOX_LISTEN]"
    )
    parser.add_argument(
        "--ca-file",
        default=default_ca_file,
        help="CA bundle used to verify the Freebox certificate; verification is disabled "
             "without it [env: FREEBOX_CA_FILE]"
    )
    parser.add_argument(
        "--log-level",
        default=default_log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO) [env: FREEBOX_LOG_LEVEL]"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Shortcut for --log-level DEBUG"
    )

    args = parser.parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.debug else getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    app = create_app(args.config,
                     discovery=DiscoveryStrategy(args.discovery),
                     force_api_version=args.api_version,
                     host_details=args.host_details,
                     listen=args.listen,
                     ca_file=args.ca_file)
    return app()


if __name__ == "__main__":
    sys.exit(main())
