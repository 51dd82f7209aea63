"""Data model of a machine's specifications and the display formatting of its values."""

from __future__ import annotations

import re
from dataclasses import MISSING, dataclass, field
from datetime import datetime

KIB = 1024
GIB = 1024**3
GB = 1000**3

_DIMM_TYPES = {
    18: "DDR",
    19: "DDR2",
    20: "DDR2 FB-DIMM",
    24: "DDR3",
    26: "DDR4",
    27: "LPDDR",
    28: "LPDDR2",
    29: "LPDDR3",
    30: "LPDDR4",
    34: "DDR5",
    35: "LPDDR5",
}

_KEY_NAMES = {
    "CSName": "DeviceName",
    "Caption": "Edition",
    "SocketDesignation": "SocketType",
    "NumberOfCores": "TotalCore",
    "ThreadCount": "TotalThread",
    "SMBIOSMemoryType": "Type",
    "AdapterCompatibility": "Vendor",
    "AdapterDACType": "Type",
}

_SIGNED_INT = re.compile(r"[+-]?\d+")
_STAMP = re.compile(r"\d{14}")


def format_clock_speed(mhz):
    """Render a clock speed given in MHz as GHz with three decimals."""
    return f"{mhz / 1e3:.3f}"


def format_cache_size(kib):
    """Render a cache size given in KiB as whole MiB."""
    return str(int(kib) // KIB)


def dimm_type_name(code):
    """Name of an SMBIOS memory type code (DSP0134, table 77)."""
    return _DIMM_TYPES.get(code, "unknown")


def format_capacity(size):
    """Render a byte count as whole GiB."""
    return str(int(size) // GIB)


def format_disk_size(size):
    """Render a byte count as whole GB."""
    return str(int(size) // GB)


def format_install_date(value):
    """Render a CIM datetime as RFC 3339.

    The offset is read without its sign. Malformed dates and offsets yield
    a message in place of the date; a value too short to hold an offset
    raises ValueError.
    """
    if len(value) < 22:
        raise ValueError(f"install date too short: {value!r}")
    stamp, offset_text = value[:14], value[22:]

    if not _SIGNED_INT.fullmatch(offset_text):
        return f"invalid UTC offset {offset_text!r}"
    offset = int(offset_text)
    hours = abs(offset) // 60 * (1 if offset >= 0 else -1)
    minutes = offset - hours * 60
    if minutes < 0 or minutes >= 60 or abs(hours) > 24:
        return f"invalid UTC offset {offset_text!r}"

    if not _STAMP.fullmatch(stamp):
        return f"invalid date {stamp!r}"
    try:
        moment = datetime.strptime(stamp, "%Y%m%d%H%M%S")
    except ValueError as exc:
        return str(exc)

    total = hours * 60 + minutes
    if total == 0:
        zone = "Z"
    else:
        zone = f"{'+' if total > 0 else '-'}{abs(hours):02d}:{minutes:02d}"
    return moment.isoformat(timespec="seconds") + zone


def map_key(name):
    """Translate a raw field name into a friendlier label."""
    return _KEY_NAMES.get(name, name)


def _field(key, *, default=MISSING, default_factory=MISSING, formatter=None):
    metadata = {"key": key}
    if formatter is not None:
        metadata["format"] = formatter
    return field(default=default, default_factory=default_factory, metadata=metadata)


@dataclass
class CurrentUser:
    username: str = _field("Username", default="")
    fullname: str = _field("Fullname", default="")
    sid: str = _field("SID", default="")


@dataclass
class Windows:
    cs_name: str = _field("CSName", default="")
    caption: str = _field("Caption", default="")
    version: str = _field("Version", default="")
    build_number: str = _field("BuildNumber", default="")
    serial_number: str = _field("SerialNumber", default="")
    install_date: str = _field("InstallDate", default="", formatter=format_install_date)
    registered_user: str = _field("RegisteredUser", default="")
    original_product_key: str = _field("OriginalProductKey", default="")


@dataclass
class System:
    manufacturer: str = _field("Manufacturer", default="")
    family: str = _field("Family", default="")
    version: str = _field("Version", default="")
    product_name: str = _field("ProductName", default="")
    sku: str = _field("SKU", default="")


@dataclass
class Baseboard:
    manufacturer: str = _field("Manufacturer", default="")
    product: str = _field("Product", default="")
    version: str = _field("Version", default="")


@dataclass
class BIOS:
    vendor: str = _field("Vendor", default="")
    version: str = _field("Version", default="")
    release_date: str = _field("ReleaseDate", default="")


@dataclass
class CPU:
    name: str = _field("Name", default="")
    socket_designation: str = _field("SocketDesignation", default="")
    number_of_cores: int = _field("NumberOfCores", default=0)
    thread_count: int = _field("ThreadCount", default=0)
    max_clock_speed: int = _field("MaxClockSpeed", default=0, formatter=format_clock_speed)
    l2_cache_size: int = _field("L2CacheSize", default=0, formatter=format_cache_size)
    l3_cache_size: int = _field("L3CacheSize", default=0, formatter=format_cache_size)


@dataclass
class GPU:
    name: str = _field("Name", default="")
    adapter_compatibility: str = _field("AdapterCompatibility", default="")
    adapter_dac_type: str = _field("AdapterDACType", default="")


@dataclass
class DIMM:
    device_locator: str = _field("DeviceLocator", default="")
    bank_label: str = _field("BankLabel", default="")
    smbios_memory_type: int = _field("SMBIOSMemoryType", default=0, formatter=dimm_type_name)
    speed: int = _field("Speed", default=0)
    capacity: int = _field("Capacity", default=0, formatter=format_capacity)
    manufacturer: str = _field("Manufacturer", default="")
    part_number: str = _field("PartNumber", default="")
    serial_number: str = _field("SerialNumber", default="")


@dataclass
class Memory:
    total_size: int = _field("TotalSize", default=0, formatter=format_capacity)
    total_slot: int = _field("TotalSlot", default=0)
    dimms: list[DIMM] = _field("DIMMs", default_factory=list)


@dataclass
class Disk:
    model: str = _field("Model", default="")
    size: int = _field("Size", default=0, formatter=format_disk_size)
    serial_number: str = _field("SerialNumber", default="")
    status: str = _field("Status", default="")


@dataclass
class NetAdapter:
    name: str = _field("Name", default="")
    mac_address: str = _field("MACAddress", default="")
    manufacturer: str = _field("Manufacturer", default="")


@dataclass
class Specs:
    """All collected specifications; field order is the report order."""

    current_user: CurrentUser = _field("CurrentUser", default_factory=CurrentUser)
    windows: Windows = _field("Windows", default_factory=Windows)
    system: System = _field("System", default_factory=System)
    baseboard: Baseboard = _field("Baseboard", default_factory=Baseboard)
    bios: BIOS = _field("BIOS", default_factory=BIOS)
    cpus: list[CPU] = _field("CPUs", default_factory=list)
    gpus: list[GPU] = _field("GPUs", default_factory=list)
    memory: Memory = _field("Memory", default_factory=Memory)
    disks: list[Disk] = _field("Disks", default_factory=list)
    net_adapters: list[NetAdapter] = _field("NetAdapters", default_factory=list)