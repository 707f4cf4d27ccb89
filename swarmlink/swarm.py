"""Join the swarm, then take turns as leader or follower."""

from __future__ import annotations

import random
import time
from typing import Iterable, Optional

from .drone import Drone
from .packets import (
    MAX_NODE_NAME_LENGTH,
    CommandPacket,
    HeartbeatPacket,
    JoinRequestPacket,
    JoinResponsePacket,
    LeaderRequestPacket,
    PacketType,
    PermissionToSendPacket,
)
from .radio import RadioDataRate, RadioInterface

BASE_TX = 0xF0F0F0F0D2
BASE_RX = 0xF0F0F0F0E1
CHANNEL = 1

DEFAULT_MEMBERS = (1, 2, 3)
GROUND_STATION_ID = 0

REPLY_WINDOW = 0.3
POLL_INTERVAL = 0.01
JOIN_POLL_INTERVAL = 0.1
FOLLOWER_TICK = 0.05
TELEMETRY_INTERVAL = 2.0
LEADER_TIMEOUT = 5.0

DEFAULT_ALTITUDE = 120.0
DEFAULT_BATTERY_VOLTAGE = 3.7


def _now32() -> int:
    return int(time.time()) & 0xFFFFFFFF


def _tune(radio: RadioInterface) -> None:
    radio.configure(CHANNEL, RadioDataRate.MEDIUM_RATE)
    radio.set_address(BASE_TX, BASE_RX)


def _peek_type(radio: RadioInterface) -> Optional[int]:
    peek = radio.receive(1, peek_only=True)
    return None if peek is None else peek[0]


def _read_sensor(sensor) -> tuple[tuple[int, int, int], tuple[int, int, int]]:
    if sensor is not None:
        try:
            return sensor.read_acceleration(), sensor.read_gyro()
        except OSError:
            pass
    accel = tuple(random.randrange(100) for _ in range(3))
    gyro = tuple(random.randrange(50) for _ in range(3))
    return accel, gyro


def build_swarm(drone: Drone, members: Iterable[int] = DEFAULT_MEMBERS) -> list[int]:
    """The members the leader polls, leaving out the drone itself."""
    return [member for member in members if member != drone.self_id]


def join_network(radio: RadioInterface, drone: Drone) -> JoinResponsePacket:
    """Ask to join, wait for the response and adopt the id and leader it gives."""
    _tune(radio)
    name = drone.name.encode("utf-8")[: MAX_NODE_NAME_LENGTH - 1]
    request = JoinRequestPacket(
        timestamp=_now32(),
        temp_id=drone.temp_id,
        requested_name=name.decode("utf-8", errors="ignore"),
    )
    radio.send(request.pack())
    print("JoinRequest gönderildi, yanıt bekleniyor...")

    while True:
        if _peek_type(radio) == PacketType.JOIN_RESPONSE:
            data = radio.receive(JoinResponsePacket.SIZE)
            if data is not None:
                response = JoinResponsePacket.unpack(data)
                break
        time.sleep(JOIN_POLL_INTERVAL)

    drone.set_network_id(response.assigned_id)
    print(
        f"Ağ ID: {response.assigned_id} Lider: {response.current_leader_id}"
        f" Kanal: {CHANNEL}"
    )
    drone.current_leader_id = response.current_leader_id
    drone.is_leader = response.current_leader_id == response.assigned_id
    _tune(radio)
    return response


def leader_loop(radio: RadioInterface, drone: Drone, swarm: list[int]) -> None:
    """Grant send turns to the ground station and each member in turn."""
    index = 0
    while drone.is_leader:
        _tune(radio)
        radio.send(PermissionToSendPacket(GROUND_STATION_ID, _now32()).pack())

        deadline = time.monotonic() + REPLY_WINDOW
        while time.monotonic() < deadline:
            if _peek_type(radio) == PacketType.COMMAND:
                # The ground station's command is taken off the air; it needs no action.
                radio.receive(CommandPacket.SIZE)
                break
            time.sleep(POLL_INTERVAL)

        _tune(radio)
        if swarm:
            target = swarm[index]
            radio.send(PermissionToSendPacket(target, _now32()).pack())
            deadline = time.monotonic() + REPLY_WINDOW
            while time.monotonic() < deadline:
                if _peek_type(radio) is not None:
                    drone.handle_incoming()
                    break
                time.sleep(POLL_INTERVAL)
            index = (index + 1) % len(swarm)

        if drone.role_changed:
            drone.clear_role_changed()
            break


def follower_loop(radio: RadioInterface, drone: Drone, sensor) -> None:
    """Follow the leader: react to packets, report telemetry, ask for a leader when silent."""
    last_leader = last_telemetry = time.monotonic()
    while not drone.is_leader:
        kind = _peek_type(radio)
        if kind is not None:
            if kind == PacketType.HEARTBEAT:
                if radio.receive(HeartbeatPacket.SIZE) is not None:
                    last_leader = time.monotonic()
            else:
                drone.handle_incoming()

        now = time.monotonic()
        if now - last_telemetry > TELEMETRY_INTERVAL:
            accel, gyro = _read_sensor(sensor)
            drone.update_sensors(
                *accel, *gyro, DEFAULT_ALTITUDE, DEFAULT_BATTERY_VOLTAGE
            )
            drone.send_telemetry()
            last_telemetry = now

        if now - last_leader > LEADER_TIMEOUT:
            radio.send(LeaderRequestPacket(drone.self_id, _now32()).pack())
            last_leader = now

        if drone.role_changed:
            drone.clear_role_changed()
            break

        time.sleep(FOLLOWER_TICK)


def run(radio: RadioInterface, drone: Drone, sensor) -> None:
    """Switch between leading and following for as long as the process lives."""
    swarm = build_swarm(drone)
    while True:
        if drone.is_leader:
            leader_loop(radio, drone, swarm)
        else:
            follower_loop(radio, drone, sensor)