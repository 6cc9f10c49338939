from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional

from freebox_utils import lower, opt_bool, opt_int, opt_str


class DiscoveryStrategy(Enum):
    HTTP = "http"
    MDNS = "mdns"


@dataclass(frozen=True)
class ApiVersion:
    """Connection facts advertised by the Freebox (GET /api_version or mDNS)."""
    api_domain: str = ""
    uid: str = ""
    https_available: bool = False
    https_port: int = 0
    device_name: str = ""
    api_version: str = ""
    """Advertised version, e.g. "10.2"."""
    api_base_url: str = ""
    device_type: str = ""

    def is_valid(self) -> bool:
        return bool(
            self.api_domain and
            self.uid and
            self.https_available and
            self.https_port and
            self.device_name and
            self.api_version and
            self.api_base_url and
            self.device_type
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApiVersion:
        return cls(
            api_domain=opt_str(data.get("api_domain")),
            uid=opt_str(data.get("uid")),
            https_available=bool(opt_bool(data.get("https_available"))),
            https_port=opt_int(data.get("https_port")) or 0,
            device_name=opt_str(data.get("device_name")),
            api_version=opt_str(data.get("api_version")),
            api_base_url=opt_str(data.get("api_base_url")),
            device_type=opt_str(data.get("device_type")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AppIdentity:
    """Fixed application identity sent when pairing and logging in."""
    app_id: str
    app_name: str
    app_version: str
    device_name: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class SessionInfo:
    challenge: str
    session_token: str


@dataclass
class Sensor:
    id: str
    name: str
    value: Optional[int]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Sensor:
        return cls(
            id=opt_str(data.get("id")),
            name=opt_str(data.get("name")),
            value=opt_int(data.get("value")),
        )


@dataclass
class SystemInfo:
    firmware_version: str = ""
    mac: str = ""
    serial: str = ""
    board_name: str = ""
    box_flavor: str = ""
    uptime_val: Optional[int] = None
    temp_cpum: Optional[int] = None
    temp_cpub: Optional[int] = None
    temp_sw: Optional[int] = None
    fan_rpm: Optional[int] = None
    sensors: list[Sensor] = field(default_factory=list)
    fans: list[Sensor] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SystemInfo:
        return cls(
            firmware_version=opt_str(data.get("firmware_version")),
            mac=opt_str(data.get("mac")),
            serial=opt_str(data.get("serial")),
            board_name=opt_str(data.get("board_name")),
            box_flavor=opt_str(data.get("box_flavor")),
            uptime_val=opt_int(data.get("uptime_val")),
            temp_cpum=opt_int(data.get("temp_cpum")),
            temp_cpub=opt_int(data.get("temp_cpub")),
            temp_sw=opt_int(data.get("temp_sw")),
            fan_rpm=opt_int(data.get("fan_rpm")),
            sensors=[Sensor.from_dict(s) for s in data.get("sensors") or []],
            fans=[Sensor.from_dict(f) for f in data.get("fans") or []],
        )


@dataclass
class XdslStatus:
    status: str = ""
    protocol: str = ""
    modulation: str = ""
    uptime: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> XdslStatus:
        return cls(
            status=opt_str(data.get("status")),
            protocol=opt_str(data.get("protocol")),
            modulation=opt_str(data.get("modulation")),
            uptime=opt_int(data.get("uptime")),
        )


@dataclass
class XdslStats:
    maxrate: Optional[int] = None
    """kbit/s"""
    rate: Optional[int] = None
    """kbit/s"""
    snr: Optional[int] = None
    attn: Optional[int] = None
    snr_10: Optional[int] = None
    """Signal/noise ratio in 1/10 dB."""
    attn_10: Optional[int] = None
    """Attenuation in 1/10 dB."""
    fec: Optional[int] = None
    crc: Optional[int] = None
    hec: Optional[int] = None
    es: Optional[int] = None
    ses: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> XdslStats:
        return cls(**{name: opt_int(data.get(name)) for name in cls.__dataclass_fields__})


@dataclass
class XdslInfo:
    status: Optional[XdslStatus] = None
    up: Optional[XdslStats] = None
    down: Optional[XdslStats] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> XdslInfo:
        status = data.get("status")
        up = data.get("up")
        down = data.get("down")
        return cls(
            status=XdslStatus.from_dict(status) if isinstance(status, dict) else None,
            up=XdslStats.from_dict(up) if isinstance(up, dict) else None,
            down=XdslStats.from_dict(down) if isinstance(down, dict) else None,
        )


@dataclass
class FtthInfo:
    sfp_present: Optional[bool] = None
    sfp_alim_ok: Optional[bool] = None
    sfp_has_power_report: Optional[bool] = None
    sfp_has_signal: Optional[bool] = None
    link: Optional[bool] = None
    sfp_serial: str = ""
    sfp_model: str = ""
    sfp_vendor: str = ""
    sfp_pwr_tx: Optional[int] = None
    """1/100 dBm"""
    sfp_pwr_rx: Optional[int] = None
    """1/100 dBm"""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FtthInfo:
        return cls(
            sfp_present=opt_bool(data.get("sfp_present")),
            sfp_alim_ok=opt_bool(data.get("sfp_alim_ok")),
            sfp_has_power_report=opt_bool(data.get("sfp_has_power_report")),
            sfp_has_signal=opt_bool(data.get("sfp_has_signal")),
            link=opt_bool(data.get("link")),
            sfp_serial=opt_str(data.get("sfp_serial")),
            sfp_model=opt_str(data.get("sfp_model")),
            sfp_vendor=opt_str(data.get("sfp_vendor")),
            sfp_pwr_tx=opt_int(data.get("sfp_pwr_tx")),
            sfp_pwr_rx=opt_int(data.get("sfp_pwr_rx")),
        )


class ConnectionMedia(Enum):
    XDSL = "xdsl"
    FTTH = "ftth"


@dataclass
class ConnectionInfo:
    state: str = ""
    type: str = ""
    media: str = ""
    ipv4: str = ""
    ipv6: str = ""
    rate_up: Optional[int] = None
    """bytes/s"""
    rate_down: Optional[int] = None
    bandwidth_up: Optional[int] = None
    """bits/s"""
    bandwidth_down: Optional[int] = None
    bytes_up: Optional[int] = None
    bytes_down: Optional[int] = None
    xdsl: Optional[XdslInfo] = None
    ftth: Optional[FtthInfo] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConnectionInfo:
        return cls(
            state=opt_str(data.get("state")),
            type=opt_str(data.get("type")),
            media=opt_str(data.get("media")),
            ipv4=opt_str(data.get("ipv4")),
            ipv6=opt_str(data.get("ipv6")),
            rate_up=opt_int(data.get("rate_up")),
            rate_down=opt_int(data.get("rate_down")),
            bandwidth_up=opt_int(data.get("bandwidth_up")),
            bandwidth_down=opt_int(data.get("bandwidth_down")),
            bytes_up=opt_int(data.get("bytes_up")),
            bytes_down=opt_int(data.get("bytes_down")),
        )


@dataclass
class SwitchHost:
    mac: str
    hostname: str


@dataclass
class SwitchPortStats:
    rx_good_bytes: Optional[int] = None
    rx_bad_bytes: Optional[int] = None
    rx_good_packets: Optional[int] = None
    rx_err_packets: Optional[int] = None
    rx_bytes_rate: Optional[int] = None
    tx_bytes: Optional[int] = None
    tx_packets: Optional[int] = None
    tx_bytes_rate: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SwitchPortStats:
        return cls(**{name: opt_int(data.get(name)) for name in cls.__dataclass_fields__})


@dataclass
class SwitchPort:
    id: int
    link: str = ""
    duplex: str = ""
    speed: str = ""
    """Link speed in Mbit/s, serialized as a string by the API."""
    mac_list: list[SwitchHost] = field(default_factory=list)
    stats: Optional[SwitchPortStats] = None

    @property
    def is_up(self) -> bool:
        return self.link == "up"

    @property
    def speed_mbps(self) -> int:
        return opt_int(self.speed) or 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SwitchPort:
        return cls(
            id=opt_int(data.get("id")) or 0,
            link=opt_str(data.get("link")),
            duplex=opt_str(data.get("duplex")),
            speed=opt_str(data.get("speed")),
            mac_list=[
                SwitchHost(mac=opt_str(m.get("mac")), hostname=opt_str(m.get("hostname")))
                for m in data.get("mac_list") or []
            ],
        )


@dataclass
class SwitchInfo:
    ports: list[SwitchPort]


@dataclass
class WifiBss:
    id: str
    """BSSID"""
    phy_id: Optional[int] = None
    state: str = ""
    sta_count: Optional[int] = None
    authorized_sta_count: Optional[int] = None
    enabled: Optional[bool] = None
    ssid: str = ""
    hide_ssid: Optional[bool] = None
    encryption: str = ""
    eapol_version: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WifiBss:
        status = data.get("status") or {}
        config = data.get("config") or {}
        return cls(
            id=opt_str(data.get("id")),
            phy_id=opt_int(data.get("phy_id")),
            state=opt_str(status.get("state")),
            sta_count=opt_int(status.get("sta_count")),
            authorized_sta_count=opt_int(status.get("authorized_sta_count")),
            enabled=opt_bool(config.get("enabled")),
            ssid=opt_str(config.get("ssid")),
            hide_ssid=opt_bool(config.get("hide_ssid")),
            encryption=opt_str(config.get("encryption")),
            eapol_version=opt_int(config.get("eapol_version")),
        )


@dataclass
class WifiStation:
    id: str
    mac: str = ""
    bssid: str = ""
    hostname: str = ""
    active: Optional[bool] = None
    """host.active, None when the station has no known host."""
    rx_bytes: Optional[int] = None
    tx_bytes: Optional[int] = None
    signal: Optional[int] = None
    """dBm"""
    bss: Optional[WifiBss] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WifiStation:
        host = data.get("host")
        return cls(
            id=opt_str(data.get("id")),
            mac=opt_str(data.get("mac")),
            bssid=opt_str(data.get("bssid")),
            hostname=opt_str(data.get("hostname")),
            active=opt_bool(host.get("active")) if isinstance(host, dict) else None,
            rx_bytes=opt_int(data.get("rx_bytes")),
            tx_bytes=opt_int(data.get("tx_bytes")),
            signal=opt_int(data.get("signal")),
        )


@dataclass
class WifiAp:
    id: int
    name: str = ""
    state: str = ""
    band: str = ""
    primary_channel: Optional[int] = None
    secondary_channel: Optional[int] = None
    capabilities: dict[str, dict[str, Any]] = field(default_factory=dict)
    """Per band capability flags, e.g. {"5g": {"vht": true}}."""
    stations: Optional[list[WifiStation]] = None

    @property
    def band_capabilities(self) -> Optional[dict[str, Any]]:
        return self.capabilities.get(self.band)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WifiAp:
        status = data.get("status") or {}
        config = data.get("config") or {}
        capabilities = data.get("capabilities") or {}
        return cls(
            id=opt_int(data.get("id")) or 0,
            name=opt_str(data.get("name")),
            state=opt_str(status.get("state")),
            band=opt_str(config.get("band")),
            primary_channel=opt_int(status.get("primary_channel")),
            secondary_channel=opt_int(status.get("secondary_channel")),
            capabilities={
                str(band): dict(caps) for band, caps in capabilities.items() if isinstance(caps, dict)
            },
        )


@dataclass
class WifiInfo:
    bss: list[WifiBss]
    ap: list[WifiAp]

    def join_stations(self) -> None:
        """Attach every station to its BSS, matched on the lower-cased BSSID."""
        by_bssid = {lower(bss.id): bss for bss in self.bss}
        for ap in self.ap:
            for station in ap.stations or []:
                station.bss = by_bssid.get(lower(station.bssid))


@dataclass
class LanInterface:
    name: str


@dataclass
class LanHostL3:
    addr: str = ""
    af: str = ""
    active: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LanHostL3:
        return cls(
            addr=opt_str(data.get("addr")),
            af=opt_str(data.get("af")),
            active=opt_bool(data.get("active")),
        )


@dataclass
class LanHost:
    id: str = ""
    primary_name: str = ""
    host_type: str = ""
    vendor_name: str = ""
    active: Optional[bool] = None
    l2_type: str = ""
    l2_id: str = ""
    l3_connectivities: list[LanHostL3] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LanHost:
        l2ident = data.get("l2ident") or {}
        return cls(
            id=opt_str(data.get("id")),
            primary_name=opt_str(data.get("primary_name")),
            host_type=opt_str(data.get("host_type")),
            vendor_name=opt_str(data.get("vendor_name")),
            active=opt_bool(data.get("active")),
            l2_type=opt_str(l2ident.get("type")),
            l2_id=opt_str(l2ident.get("id")),
            l3_connectivities=[LanHostL3.from_dict(l3) for l3 in data.get("l3connectivities") or []],
        )


@dataclass
class LanInfo:
    hosts: dict[str, list[LanHost]]
    """Interface name -> hosts seen on that interface."""
