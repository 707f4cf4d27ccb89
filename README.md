# swarmlink

swarmlink is the messaging layer of a small drone swarm. The drones talk
over nRF24-style 2.4 GHz transceivers that carry 32-byte payloads. A leader
grants permission to send. Followers answer with telemetry. The leader role
moves between drones through announcements.

The package needs Python 3.10 or later and has no runtime dependencies.
Install it with the `test` extra to run the test suite with pytest.

## Modules

### `swarmlink.packets`

This module holds the wire formats. Every message is a packed little-endian
record, and its first byte is a `PacketType`. The packet classes are
dataclasses:

- `CommandPacket`
- `TelemetryPacket` (exactly 32 bytes)
- `JoinRequestPacket`
- `JoinResponsePacket`
- `HeartbeatPacket`
- `LeaderAnnouncementPacket`
- `PermissionToSendPacket`
- `LeaderRequestPacket`

Each class has `pack()`, a class method `unpack(data)` and a `SIZE`.

- `packet_size(packet_type)` gives the size on the wire. For `UNDEFINED` and
  for unknown types it gives 1.
- `decode_packet(data)` reads the type byte and returns the matching packet.
  An `UNDEFINED` packet gives `None`.
- A value that is too short, carries the wrong type byte, has an unknown
  type or falls out of range raises `PacketError`, a `ValueError`.

### `swarmlink.radio`

`RadioInterface(tx, rx=None)` drives one transceiver in half duplex. Given a
second transceiver that only receives, it drives the pair in full duplex.

- `begin()` starts the modules at full power. It returns `False` if one of
  them fails.
- `configure(channel, datarate)` takes a channel and a `RadioDataRate`:
  `LOW_RATE`, `MEDIUM_RATE` or `HIGH_RATE`.
- `set_address(tx, rx)` and `open_listening_pipe(pipe, address)` set the
  addresses.
- `send(data)` returns whether the payload was acknowledged. A payload over
  32 bytes raises `ValueError`.
- `receive(size, peek_only=False)` returns the first `size` bytes of the next
  payload, or `None` when nothing is waiting. A peek keeps the payload, so
  the next call returns the same payload again.
- `test_rpd()` reports received power and `get_arc()` reports the
  retransmission count.

The hardware is reached through the `Transceiver` protocol, which you
implement. Its methods are:

- `begin`
- `set_pa_level`
- `start_listening`
- `stop_listening`
- `open_writing_pipe`
- `open_reading_pipe`
- `set_channel`
- `set_data_rate`
- `set_auto_ack`
- `enable_dynamic_payloads`
- `enable_ack_payload`
- `write`
- `available`
- `read`
- `test_rpd`
- `get_arc`

An in-memory object that has these methods is enough to run the protocol
logic without hardware.

### `swarmlink.mpu6050`

`Mpu6050` reads an MPU6050 accelerometer and gyroscope over the Linux I²C
device interface.

- `init(device="/dev/i2c-1", addr=0x68)` opens the bus, selects the sensor
  and wakes it.
- `read_acceleration()` and `read_gyro()` each return an `(x, y, z)` tuple.
- `close()` releases the device. The class is also a context manager.
- `decode_axes(data)` turns six big-endian register bytes into three signed
  values.
- A failure to open or read the sensor raises `SensorError`, an `OSError`.

### `swarmlink.drone`

`Drone(radio, is_leader=False, name="UnknownDrone")` keeps one drone's state:

- `temp_id` is random in 1–200 unless you pass one.
- `network_id`, `self_id`, `is_leader` and `current_leader_id` hold its
  identity and role.
- `telemetry` holds its telemetry packet.

It has these methods:

- `handle_incoming()` drains the radio and reacts to each packet:
  - A command is printed only when it is addressed to this drone and is at
    most 3 seconds old.
  - A permission for this drone enables one telemetry send.
  - A leader announcement updates the leader state and marks a role change.
  - Join responses, telemetry, heartbeats and leader requests are printed.
- `update_sensors(...)` stores new readings in the telemetry packet.
- `send_telemetry()` sends once, and only after permission. It updates
  `retries` and `link_quality`, then returns whether the send was
  acknowledged.
- `set_network_id`, `clear_network_id` and `clear_role_changed` change the
  drone's state.
- `drone_info()` returns a short summary of the drone (in Turkish), and
  `print_drone_info()` prints it.

### `swarmlink.swarm`

This module runs the swarm protocol on channel 1 at 1 Mbit/s:

- `join_network(radio, drone)` sends a join request and waits for the
  response. It then adopts the assigned ID and the leader.
- `build_swarm(drone, members=(1, 2, 3))` lists the peers to poll and leaves
  out the drone itself.
- `leader_loop(radio, drone, swarm)` grants send turns to the ground station
  (ID 0) and then to each member in turn.
- `follower_loop(radio, drone, sensor)` handles packets and sends telemetry
  every 2 seconds. It uses random readings when the sensor is absent or
  fails. After 5 seconds without a heartbeat it sends a leader request.
- `run(radio, drone, sensor)` switches between the two roles forever.

### `swarmlink.simple`

This module is a stand-alone beacon.

- `SimplePacket` carries one drone's motion readings, signal strength and
  leader flag.
- `parse_leader_message(text, drone_id, current)` interprets replies of the
  form `"<id> Leader = True"` and `"LEADER = <id>"`. A reply of neither form
  leaves `current` unchanged.
- `run_simple(radio, sensor=None, drone_id=1, iterations=None)` sends
  readings every 0.2 seconds and tracks leadership. It runs forever when
  `iterations` is `None`, and returns the final leader state. It raises
  `RuntimeError` if the radio fails to start.

### `swarmlink.columns`

This module lays several blocks of text out side by side:

- `capture_output(func)` returns what `func` printed.
- `format_side_by_side(outputs)` returns the blocks laid out as columns.
- `print_side_by_side(outputs)` prints them.

## Example

```python
from swarmlink.packets import PacketType, TelemetryPacket, decode_packet, packet_size
from swarmlink.simple import parse_leader_message

frame = TelemetryPacket(drone_id=2, timestamp=2, altitude=100.0).pack()
assert len(frame) == packet_size(PacketType.TELEMETRY) == 32

packet = decode_packet(frame)
print(packet.drone_id, packet.altitude)   # 2 100.0

assert parse_leader_message("1 Leader = True", 1, False) is True
assert parse_leader_message("LEADER = 2", 1, True) is False
```

## What the package does not do

- The package has no command-line program. Starting a drone means writing a
  short script that builds a `RadioInterface` and a `Drone` and then calls
  `join_network` and `run`.
- It ships no driver for nRF24 modules. You supply a `Transceiver`
  implementation for your radio hardware.