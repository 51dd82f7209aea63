"""Gather a machine's specifications from WMI and the registry."""

from __future__ import annotations

import getpass
import json
import os
import platform
import subprocess
from concurrent.futures import ThreadPoolExecutor, as_completed

from .models import (
    BIOS,
    CPU,
    DIMM,
    GPU,
    Baseboard,
    CurrentUser,
    Disk,
    Memory,
    NetAdapter,
    Specs,
    System,
    Windows,
)

WMI_TIMEOUT = 5.0
NOT_AVAILABLE = "N/A"
HIDDEN_PRODUCT_KEY = "***********"
VIRTUAL_VENDORS = ("windows", "openvpn", "wireguard", "oracle", "fortinet")

WINDOWS_KEY = r"SOFTWARE\Microsoft\Windows NT\CurrentVersion"
BIOS_KEY = r"HARDWARE\Description\System\BIOS"

BBS_VALUE_NAMES = (
    "BIOSVendor",
    "BIOSVersion",
    "BIOSReleaseDate",
    "BaseBoardManufacturer",
    "BaseBoardProduct",
    "BaseBoardVersion",
    "SystemManufacturer",
    "SystemFamily",
    "SystemVersion",
    "SystemProductName",
    "SystemSKU",
)

OS_QUERY = (
    "SELECT Caption, BuildNumber, SerialNumber, CSName, InstallDate,"
    "RegisteredUser FROM Win32_OperatingSystem"
)
CPU_QUERY = (
    "SELECT Name, SocketDesignation, NumberOfCores, ThreadCount, "
    "L2CacheSize, L3CacheSize, MaxClockSpeed FROM Win32_Processor"
)
GPU_QUERY = "SELECT Name, AdapterCompatibility, AdapterDACType FROM Win32_VideoController"
MEMORY_QUERY = (
    "SELECT DeviceLocator, BankLabel, SMBIOSMemoryType, Speed, Capacity, "
    "Manufacturer, PartNumber, SerialNumber FROM Win32_PhysicalMemory"
)
DISK_QUERY = "SELECT Model, Size, SerialNumber, Status FROM Win32_DiskDrive"
NET_QUERY = (
    "SELECT Name, MACAddress, Manufacturer FROM Win32_NetworkAdapter "
    "WHERE Manufacturer <> 'Microsoft'"
)
PRODUCT_KEY_QUERY = "SELECT OA3xOriginalProductKey FROM SoftwareLicensingService"

_PS_SCRIPT = (
    "$ErrorActionPreference = 'Stop'; "
    "[Console]::OutputEncoding = [Text.Encoding]::UTF8; "
    "$rows = @(Get-WmiObject -Query '__WQL__' | ForEach-Object { "
    "$row = [ordered]@{}; "
    "foreach ($p in $_.Properties) { $row[$p.Name] = $p.Value }; "
    "[pscustomobject]$row }); "
    "ConvertTo-Json -InputObject $rows -Compress -Depth 3"
)


class CollectionError(Exception):
    """Raised when a specification cannot be gathered."""


def query_wmi(wql, timeout=WMI_TIMEOUT):
    """Run a WQL query and return its rows as dictionaries."""
    script = _PS_SCRIPT.replace("__WQL__", wql.replace("'", "''"))
    command = ["powershell.exe", "-NoProfile", "-NonInteractive", "-Command", script]
    try:
        result = subprocess.run(
            command, capture_output=True, encoding="utf-8", timeout=timeout
        )
    except subprocess.TimeoutExpired as exc:
        raise CollectionError(f"WMI query timed out after {timeout} s: {wql}") from exc
    except OSError as exc:
        raise CollectionError(f"cannot run WMI query: {exc}") from exc

    if result.returncode != 0:
        message = (result.stderr or "").strip() or f"exit status {result.returncode}"
        raise CollectionError(f"WMI query failed: {message}")

    output = (result.stdout or "").strip()
    if not output:
        return []
    try:
        data = json.loads(output)
    except json.JSONDecodeError as exc:
        raise CollectionError(f"unreadable WMI output: {exc}") from exc
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return [row for row in data if isinstance(row, dict)]
    raise CollectionError("unexpected WMI output")


def read_registry_values(path, names):
    """Read string values under HKEY_LOCAL_MACHINE\\path."""
    try:
        import winreg
    except ImportError as exc:
        raise CollectionError("the Windows registry is not available") from exc

    values = {}
    try:
        with winreg.OpenKey(
            winreg.HKEY_LOCAL_MACHINE, path, 0, winreg.KEY_QUERY_VALUE
        ) as key:
            for name in names:
                value, kind = winreg.QueryValueEx(key, name)
                if kind not in (winreg.REG_SZ, winreg.REG_EXPAND_SZ):
                    raise CollectionError(f"registry value {name!r} is not a string")
                values[name] = value
    except OSError as exc:
        raise CollectionError(f"cannot read registry key {path!r}: {exc}") from exc
    return values


def _text(record, key):
    value = record.get(key)
    return "" if value is None else str(value)


def _number(record, key):
    value = record.get(key)
    if value is None:
        return 0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise CollectionError(f"{key} is not a number: {value!r}") from exc


def _or_na(text):
    return text if text else NOT_AVAILABLE


def normalize_gpus(records):
    """Build GPUs from WMI rows, marking missing vendor and type as N/A."""
    return [
        GPU(
            name=_text(row, "Name"),
            adapter_compatibility=_or_na(_text(row, "AdapterCompatibility")),
            adapter_dac_type=_or_na(_text(row, "AdapterDACType")),
        )
        for row in records
    ]


def normalize_memory(records):
    """Build the memory summary: totals, trimmed part numbers, N/A for blanks."""
    dimms = [
        DIMM(
            device_locator=_text(row, "DeviceLocator"),
            bank_label=_text(row, "BankLabel"),
            smbios_memory_type=_number(row, "SMBIOSMemoryType"),
            speed=_number(row, "Speed"),
            capacity=_number(row, "Capacity"),
            manufacturer=_or_na(_text(row, "Manufacturer")),
            part_number=_or_na(_text(row, "PartNumber").strip()),
            serial_number=_or_na(_text(row, "SerialNumber")),
        )
        for row in records
    ]
    return Memory(
        total_size=sum(dimm.capacity for dimm in dimms),
        total_slot=len(dimms),
        dimms=dimms,
    )


def normalize_disks(records):
    """Build disks from WMI rows, marking missing model and serial as N/A."""
    return [
        Disk(
            model=_or_na(_text(row, "Model")),
            size=_number(row, "Size"),
            serial_number=_or_na(_text(row, "SerialNumber")),
            status=_text(row, "Status"),
        )
        for row in records
    ]


def filter_net_adapters(records):
    """Keep adapters whose manufacturer is not a known virtual-adapter vendor."""
    adapters = []
    for row in records:
        manufacturer = _text(row, "Manufacturer")
        lowered = manufacturer.lower()
        if any(vendor in lowered for vendor in VIRTUAL_VENDORS):
            continue
        adapters.append(
            NetAdapter(
                name=_text(row, "Name"),
                mac_address=_text(row, "MACAddress"),
                manufacturer=manufacturer,
            )
        )
    return adapters


def bbs_from_registry(values):
    """Return (BIOS, Baseboard, System) from the BIOS registry values."""

    def get(name):
        try:
            value = values[name]
        except KeyError as exc:
            raise CollectionError(f"registry value {name!r} is missing") from exc
        return _or_na("" if value is None else str(value))

    bios = BIOS(
        vendor=get("BIOSVendor"),
        version=get("BIOSVersion"),
        release_date=get("BIOSReleaseDate"),
    )
    baseboard = Baseboard(
        manufacturer=get("BaseBoardManufacturer"),
        product=get("BaseBoardProduct"),
        version=get("BaseBoardVersion"),
    )
    system = System(
        manufacturer=get("SystemManufacturer"),
        family=get("SystemFamily"),
        version=get("SystemVersion"),
        product_name=get("SystemProductName"),
        sku=get("SystemSKU"),
    )
    return bios, baseboard, system


def _wql_string(text):
    return "'" + text.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _collect_current_user(query):
    try:
        name = os.environ.get("USERNAME") or getpass.getuser()
    except OSError as exc:
        raise CollectionError(f"cannot determine the current user: {exc}") from exc
    domain = os.environ.get("USERDOMAIN") or platform.node()
    records = query(
        "SELECT FullName, SID FROM Win32_UserAccount "
        f"WHERE Name = {_wql_string(name)} AND Domain = {_wql_string(domain)}"
    )
    record = records[0] if records else {}
    return CurrentUser(
        username=f"{domain}\\{name}",
        fullname=_text(record, "FullName"),
        sid=_text(record, "SID"),
    )


def _collect_windows(query, registry):
    records = query(OS_QUERY)
    if not records:
        raise CollectionError("no operating system reported by WMI")
    row = records[0]
    display_version = registry(WINDOWS_KEY, ("DisplayVersion",))
    try:
        version = display_version["DisplayVersion"]
    except KeyError as exc:
        raise CollectionError("registry value 'DisplayVersion' is missing") from exc
    return Windows(
        cs_name=_text(row, "CSName"),
        caption=_text(row, "Caption"),
        version=str(version),
        build_number=_text(row, "BuildNumber"),
        serial_number=_text(row, "SerialNumber"),
        install_date=_text(row, "InstallDate"),
        registered_user=_text(row, "RegisteredUser"),
        original_product_key=HIDDEN_PRODUCT_KEY,
    )


def _collect_cpus(query):
    return [
        CPU(
            name=_text(row, "Name"),
            socket_designation=_text(row, "SocketDesignation"),
            number_of_cores=_number(row, "NumberOfCores"),
            thread_count=_number(row, "ThreadCount"),
            max_clock_speed=_number(row, "MaxClockSpeed"),
            l2_cache_size=_number(row, "L2CacheSize"),
            l3_cache_size=_number(row, "L3CacheSize"),
        )
        for row in query(CPU_QUERY)
    ]


def collect(query=query_wmi, registry=read_registry_values):
    """Gather all specifications concurrently; the first failure is raised."""
    tasks = {
        "windows": lambda: _collect_windows(query, registry),
        "current_user": lambda: _collect_current_user(query),
        "cpus": lambda: _collect_cpus(query),
        "gpus": lambda: normalize_gpus(query(GPU_QUERY)),
        "memory": lambda: normalize_memory(query(MEMORY_QUERY)),
        "disks": lambda: normalize_disks(query(DISK_QUERY)),
        "net_adapters": lambda: filter_net_adapters(query(NET_QUERY)),
        "bbs": lambda: bbs_from_registry(registry(BIOS_KEY, BBS_VALUE_NAMES)),
    }

    results = {}
    first_error = None
    with ThreadPoolExecutor(max_workers=len(tasks)) as pool:
        futures = {pool.submit(task): name for name, task in tasks.items()}
        for future in as_completed(futures):
            try:
                results[futures[future]] = future.result()
            except Exception as exc:  # noqa: BLE001 - re-raised below
                if first_error is None:
                    first_error = exc
    if first_error is not None:
        raise first_error

    bios, baseboard, system = results["bbs"]
    return Specs(
        current_user=results["current_user"],
        windows=results["windows"],
        system=system,
        baseboard=baseboard,
        bios=bios,
        cpus=results["cpus"],
        gpus=results["gpus"],
        memory=results["memory"],
        disks=results["disks"],
        net_adapters=results["net_adapters"],
    )


def collect_product_key(specs, query=query_wmi):
    """Store the firmware-embedded product key in ``specs`` and return it."""
    records = query(PRODUCT_KEY_QUERY)
    if not records:
        raise CollectionError("no licensing service reported by WMI")
    key = _text(records[0], "OA3xOriginalProductKey") or NOT_AVAILABLE
    specs.windows.original_product_key = key
    return key