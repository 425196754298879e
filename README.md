# cx34log

A library for monitoring a CX34 heat pump. It reads the unit's Modbus
holding registers, keeps running statistics over a heating or cooling
run, and sends a one-line summary of each run to a web logging script
over HTTPS.

## Installation

```
pip install .
```

The package depends on nothing outside the standard library.

## Reading the heat pump (`cx34log.status`)

`CX34Reading.read(client, label, out=None)` polls the unit and returns a
`CX34Reading`. The `client` is any object with a method
`read_holding_registers(address, count)` that returns a sequence of
register values. Three reads are made: 64 registers from 200, the inlet
temperature at 281, and the mode and cooling/heating setpoints at 141.
Values are treated as signed 16-bit integers. If a read returns fewer
registers than asked for, `ModbusError` is raised.

The reading holds `ambient`, `inlet`, `outlet` and `setpoint` in °F,
`flow` in gallons, `setting` (pump setting), `current`, `volts`,
`supplemental`, `frequency` and `defrost`, plus the derived values:

- `BTU = (outlet - inlet) * flow * 500`
- `Watts = current * 240`
- `COP = BTU / 3.412 / Watts`, or 0 when `Watts` is not positive

After reading, a newline and the line from `summary(label)` are written
to `out` (standard output when `out` is `None`).

```python
import io
from cx34log.status import CX34Reading

out = io.StringIO()
reading = CX34Reading.read(client, "Radiant", out)
print(reading.summary("Radiant"))
```

Temperatures arrive as tenths of a degree Celsius and flow as tenths of
a litre; `tenths_celsius_to_fahrenheit` and `liters_to_gallons` do the
conversions.

## Summarising a run

`CX34Status` collects readings. Ambient, setpoint, inlet, outlet, flow
and compressor frequency are each tracked by an `HLA`, which keeps the
`high`, `low` and `average` of the values given to `add` and formats them
with `stat_line()` as `high,low,average` to one decimal place.
`log(reading)` also integrates `BTU`, `Watts` and `supplemental` over the
time since the previous call.

```python
from cx34log.status import CX34Status

status = CX34Status()
status.log(reading)
if status.changed(reading):
    line = status.status_line("Radiant")
    status.reset()
```

`changed(reading)` returns false until a reading has been logged since
the last `reset()`. After that it returns true when the compressor has
started or stopped (frequency going between zero and non-zero), or when
more than an hour has passed since the reset.

`status_line(label)` returns a comma-separated line: the label, the
elapsed time as `h:mm:ss`, the `stat_line()` of ambient, setpoint, inlet,
outlet and flow, then the BTU and Watts totals and supplemental. When the
last logged frequency was above zero, the COP, BTU per hour and average
frequency are appended.

`CX34Status` takes an optional `clock`, a callable returning
milliseconds; by default it uses a monotonic clock.

## Posting status lines (`cx34log.wifilogger`)

`WifiLogger` is configured with a `LoggerConfig` (`script_id`, `host`,
`port`, `response_timeout`, `read_grace`). `post_update(status)` sends

```
GET /macros/s/<script_id>/exec?Action=LogHPRun&Status=<status> HTTP/1.1
```

with a keep-alive header over a TLS connection, reads the reply, and
returns the redirect target from its `Location:` header, or `None` when
there is none, when the connection fails, or when no reply arrives within
`response_timeout` seconds. The status text is sent as given, without
URL encoding. The connection is kept for later calls unless the server
closed it or an error occurred. `request_path` and `build_request` give
the path and the raw request bytes; `find_redirect(lines)` picks the
redirect target out of response lines. A custom `connect(host, port)`
callable can be passed to `WifiLogger` in place of the default TLS
connection.

```python
from cx34log.wifilogger import LoggerConfig, WifiLogger

logger = WifiLogger(LoggerConfig(script_id="placeholder"))
redirect = logger.post_update(line)
```

Progress and failures are reported through the standard `logging`
module.

## What the package does not do

- It has no command-line program and no polling loop; the calling code
  decides when to read, log, check `changed` and post.
- It has no Modbus transport of its own; you supply the client.
- It does not request the redirect target that `post_update` returns.
- It does not manage network connectivity beyond opening the HTTPS
  connection.

## Running the tests

```
pip install .[test]
pytest
```