# winspecter

Winspecter collects a Windows machine's specifications and prints them in
the format you choose: the current user, Windows edition, version and install
date, system, baseboard and BIOS identity, CPUs, GPUs, memory modules, disks
and physical network adapters.

Collection runs WMI queries through `powershell.exe` and reads the Windows
registry with `winreg`, so it only works on Windows. The table, text,
serialisation and HTML functions work anywhere on a `Specs` value.

## Installation

```
pip install .
```

## Command line

Pick one output format:

```
winspecter --pretty        # indented, YAML-like listing
winspecter --print         # same as --pretty
winspecter --flat          # one "Section Field: value" line per item
winspecter --csv           # two lines: keys, then values
winspecter --vcsv          # one "key","value" line per item
winspecter --json          # compact JSON
winspecter --yaml          # block YAML with lower-case keys
winspecter --toml
winspecter --version
```

Options may be written with one or two dashes (`-json` or `--json`).

CSV and VCSV options (defaults `"` and `,`):

```
winspecter --csv --delim ";" --quote "'"
```

Cells are wrapped in the quote string as they are; quotes inside a value are
not doubled.

Add `--key` to any format to include the Windows original product key
(`N/A` when the firmware holds none); otherwise it is shown as `***********`.

`--help` prints usage. Running without a format, or with stray positional
arguments, prints usage and exits with status 1; an unknown option exits
with status 2; a failure during collection prints the error and exits with
status 1.

## Units

- CPU clock speed in GHz with three decimals
- L2/L3 cache sizes in MiB
- Memory capacity and total size in GiB
- Disk size in GB
- Memory type as a name (DDR4, LPDDR5, ...) or `unknown`
- Windows install date as RFC 3339

Empty GPU vendor/type, DIMM manufacturer/part/serial, disk model/serial and
BIOS, baseboard and system fields are shown as `N/A`. Network adapters made
by Windows, OpenVPN, WireGuard, Oracle or Fortinet are left out.

## Library use

```python
from winspecter.collector import collect, collect_product_key
from winspecter.text import text_pretty, text_flat, text_csv, text_vcsv
from winspecter.serial import to_dict, to_json, to_yaml, to_toml
from winspecter.html import write_html, open_html

specs = collect()                 # raises CollectionError on failure
collect_product_key(specs)        # optional
print(text_pretty(specs, ": "))
print(text_csv(specs, ",", '"'))
print(to_json(specs))

report = write_html(specs)        # writes user@DOMAIN_<time>.html here
open_html(report)                 # opens it with the default browser
```

`collect(query, registry)` accepts replacement functions for the WMI query
and registry reader, which is handy for testing. The data classes live in
`winspecter.models`, and `winspecter.table.specs_table` turns a `Specs` value
into the two-column table that the text and HTML formats are built from.

## What it does not do

There is no command that writes the HTML report; call `write_html` and
`open_html` from Python. The HTML page is a plain document with the report
body, without its own styling or scripts.