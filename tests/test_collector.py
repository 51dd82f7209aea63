import subprocess
from unittest import mock

import pytest

from winspecter.collector import (
    BBS_VALUE_NAMES,
    CollectionError,
    bbs_from_registry,
    collect,
    collect_product_key,
    filter_net_adapters,
    normalize_disks,
    normalize_gpus,
    normalize_memory,
    query_wmi,
)
from winspecter.models import GIB, Specs

RECORDS = {
    "Win32_OperatingSystem": [
        {
            "CSName": "TESTHOST",
            "Caption": "Windows Test Edition",
            "BuildNumber": "22631",
            "SerialNumber": "SN-0000-TEST",
            "InstallDate": "20240101120000.000000+060",
            "RegisteredUser": "tester",
        }
    ],
    "Win32_UserAccount": [{"FullName": "Test User", "SID": "S-1-5-21-0-0-0-1000"}],
    "Win32_Processor": [
        {
            "Name": "Test CPU",
            "SocketDesignation": "SOCKET0",
            "NumberOfCores": 8,
            "ThreadCount": 16,
            "MaxClockSpeed": 3600,
            "L2CacheSize": 4096,
            "L3CacheSize": 16384,
        }
    ],
    "Win32_VideoController": [
        {"Name": "Test GPU", "AdapterCompatibility": None, "AdapterDACType": ""}
    ],
    "Win32_PhysicalMemory": [
        {
            "DeviceLocator": "DIMM A",
            "BankLabel": "BANK 0",
            "SMBIOSMemoryType": 26,
            "Speed": 3200,
            "Capacity": "17179869184",
            "Manufacturer": "",
            "PartNumber": "  PART-1  ",
            "SerialNumber": "SN-DIMM-TEST",
        }
    ],
    "Win32_DiskDrive": [
        {"Model": "", "Size": 512110190592, "SerialNumber": None, "Status": "OK"}
    ],
    "Win32_NetworkAdapter": [
        {"Name": "Ethernet", "MACAddress": "00:00:5E:00:53:01", "Manufacturer": "Acme Networks"},
        {"Name": "VPN", "MACAddress": "00:00:5E:00:53:02", "Manufacturer": "WireGuard LLC"},
    ],
    "SoftwareLicensingService": [{"OA3xOriginalProductKey": ""}],
}

BBS_VALUES = {name: f"value-{name}" for name in BBS_VALUE_NAMES}
BBS_VALUES["SystemSKU"] = ""

REGISTRY = {
    r"SOFTWARE\Microsoft\Windows NT\CurrentVersion": {"DisplayVersion": "23H2"},
    r"HARDWARE\Description\System\BIOS": BBS_VALUES,
}


def fake_query(wql):
    table = wql.split(" FROM ")[1].split()[0]
    return RECORDS[table]


def fake_registry(path, names):
    values = REGISTRY[path]
    return {name: values[name] for name in names}


@pytest.fixture
def user_env(monkeypatch):
    monkeypatch.setenv("USERNAME", "tester")
    monkeypatch.setenv("USERDOMAIN", "TESTDOMAIN")


def test_normalize_gpus_marks_missing_values():
    gpus = normalize_gpus(RECORDS["Win32_VideoController"])
    assert [gpu.name for gpu in gpus] == ["Test GPU"]
    assert gpus[0].adapter_compatibility == "N/A"
    assert gpus[0].adapter_dac_type == "N/A"


def test_normalize_memory_totals_and_cleanup():
    records = [
        {"Capacity": 8 * GIB, "PartNumber": " A1 ", "Manufacturer": "Maker"},
        {"Capacity": 4 * GIB, "PartNumber": "   ", "SerialNumber": "SN-X"},
    ]
    memory = normalize_memory(records)
    assert memory.total_slot == len(records)
    assert memory.total_size == sum(dimm.capacity for dimm in memory.dimms)
    assert memory.dimms[0].part_number == "A1"
    assert memory.dimms[1].part_number == "N/A"
    assert memory.dimms[1].manufacturer == "N/A"
    assert memory.dimms[0].serial_number == "N/A"
    assert memory.dimms[1].serial_number == "SN-X"


def test_normalize_memory_empty():
    memory = normalize_memory([])
    assert (memory.total_size, memory.total_slot, memory.dimms) == (0, 0, [])


def test_normalize_disks():
    disks = normalize_disks(RECORDS["Win32_DiskDrive"])
    assert disks[0].model == "N/A"
    assert disks[0].serial_number == "N/A"
    assert disks[0].size == RECORDS["Win32_DiskDrive"][0]["Size"]
    assert disks[0].status == "OK"


def test_normalize_rejects_non_numeric():
    with pytest.raises(CollectionError):
        normalize_disks([{"Size": "lots"}])


@pytest.mark.parametrize("vendor", ["Windows", "OpenVPN Inc.", "WireGuard", "Oracle", "Fortinet"])
def test_filter_net_adapters_drops_virtual(vendor):
    records = [
        {"Name": "virtual", "Manufacturer": vendor},
        {"Name": "real", "Manufacturer": "Acme"},
    ]
    assert [adapter.name for adapter in filter_net_adapters(records)] == ["real"]


def test_filter_net_adapters_keeps_order():
    records = [{"Name": name, "Manufacturer": "Acme"} for name in ("a", "b", "c")]
    assert [adapter.name for adapter in filter_net_adapters(records)] == ["a", "b", "c"]


def test_bbs_from_registry():
    bios, baseboard, system = bbs_from_registry(BBS_VALUES)
    assert bios.vendor == BBS_VALUES["BIOSVendor"]
    assert baseboard.product == BBS_VALUES["BaseBoardProduct"]
    assert system.product_name == BBS_VALUES["SystemProductName"]
    assert system.sku == "N/A"


def test_bbs_from_registry_missing_value():
    values = dict(BBS_VALUES)
    del values["SystemFamily"]
    with pytest.raises(CollectionError):
        bbs_from_registry(values)


def test_collect_builds_specs(user_env):
    specs = collect(fake_query, fake_registry)
    assert specs.current_user.username == "TESTDOMAIN\\tester"
    assert specs.current_user.fullname == "Test User"
    assert specs.windows.cs_name == "TESTHOST"
    assert specs.windows.version == "23H2"
    assert specs.windows.original_product_key == "***********"
    assert specs.cpus[0].thread_count == 16
    assert specs.gpus[0].adapter_dac_type == "N/A"
    assert specs.memory.total_slot == 1
    assert specs.memory.dimms[0].part_number == "PART-1"
    assert [adapter.name for adapter in specs.net_adapters] == ["Ethernet"]
    assert specs.bios.vendor == BBS_VALUES["BIOSVendor"]
    assert specs.system.sku == "N/A"


def test_collect_propagates_errors(user_env):
    def failing(wql):
        if "Win32_DiskDrive" in wql:
            raise CollectionError("disk failure")
        return fake_query(wql)

    with pytest.raises(CollectionError, match="disk failure"):
        collect(failing, fake_registry)


def test_collect_requires_operating_system(user_env):
    def no_os(wql):
        return [] if "Win32_OperatingSystem" in wql else fake_query(wql)

    with pytest.raises(CollectionError):
        collect(no_os, fake_registry)


def test_collect_product_key_defaults_to_na():
    specs = Specs()
    assert collect_product_key(specs, fake_query) == "N/A"
    assert specs.windows.original_product_key == "N/A"


def test_collect_product_key_sets_value():
    specs = Specs()
    key = collect_product_key(specs, lambda wql: [{"OA3xOriginalProductKey": "placeholder"}])
    assert key == "placeholder"
    assert specs.windows.original_product_key == "placeholder"


def test_collect_product_key_empty_result():
    with pytest.raises(CollectionError):
        collect_product_key(Specs(), lambda wql: [])


def _completed(stdout, returncode=0, stderr=""):
    return subprocess.CompletedProcess(["powershell.exe"], returncode, stdout, stderr)


def test_query_wmi_single_object():
    with mock.patch("subprocess.run", return_value=_completed('{"Name": "cpu"}')):
        assert query_wmi("SELECT Name FROM Win32_Processor") == [{"Name": "cpu"}]


def test_query_wmi_list_and_quoting():
    with mock.patch("subprocess.run", return_value=_completed('[{"a": 1}, {"a": 2}]')) as run:
        rows = query_wmi("SELECT a FROM T WHERE b <> 'x'")
    assert rows == [{"a": 1}, {"a": 2}]
    script = run.call_args.args[0][-1]
    assert "''x''" in script


def test_query_wmi_empty_output():
    with mock.patch("subprocess.run", return_value=_completed("")):
        assert query_wmi("SELECT a FROM T") == []


def test_query_wmi_failure_status():
    with mock.patch("subprocess.run", return_value=_completed("", 1, "boom")):
        with pytest.raises(CollectionError, match="boom"):
            query_wmi("SELECT a FROM T")


def test_query_wmi_timeout():
    error = subprocess.TimeoutExpired(cmd="powershell.exe", timeout=5)
    with mock.patch("subprocess.run", side_effect=error):
        with pytest.raises(CollectionError):
            query_wmi("SELECT a FROM T")


def test_query_wmi_missing_shell():
    with mock.patch("subprocess.run", side_effect=FileNotFoundError("powershell.exe")):
        with pytest.raises(CollectionError):
            query_wmi("SELECT a FROM T")


def test_query_wmi_bad_json():
    with mock.patch("subprocess.run", return_value=_completed("not json")):
        with pytest.raises(CollectionError):
            query_wmi("SELECT a FROM T")