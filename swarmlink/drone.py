"""A swarm member that reacts to incoming packets and reports telemetry."""

from __future__ import annotations

import random
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Optional, TextIO

from .packets import (
    CommandPacket,
    HeartbeatPacket,
    JoinResponsePacket,
    LeaderAnnouncementPacket,
    LeaderRequestPacket,
    PacketType,
    PermissionToSendPacket,
    TelemetryPacket,
    packet_size,
)
from .radio import RadioInterface

DEFAULT_NAME = "UnknownDrone"
COMMAND_MAX_AGE = 3


@dataclass(frozen=True)
class _RawPacket:
    type_byte: int
    data: bytes


def _now32(clock: Callable[[], float]) -> int:
    return int(clock()) & 0xFFFFFFFF


class Drone:
    """One drone of the swarm, bound to a radio link."""

    def __init__(
        self,
        radio: RadioInterface,
        is_leader: bool = False,
        name: str = DEFAULT_NAME,
        *,
        temp_id: Optional[int] = None,
        clock: Callable[[], float] = time.time,
        out: Optional[TextIO] = None,
    ) -> None:
        self.radio = radio
        self.is_leader = is_leader
        self.name = name
        self.temp_id = temp_id if temp_id is not None else random.randint(1, 200)
        self.network_id: Optional[int] = None
        self.current_leader_id: Optional[int] = None
        self.telemetry = TelemetryPacket()
        self.total_sends = 0
        self.failed_sends = 0
        self.undefined_received = 0
        self._clock = clock
        self._out = out
        self._has_permission = False
        self._role_changed = False
        self._rx_queue: deque[_RawPacket] = deque()

    @property
    def self_id(self) -> int:
        """The network id if assigned, otherwise the temporary id."""
        return self.network_id if self.network_id is not None else self.temp_id

    @property
    def has_permission_to_send(self) -> bool:
        return self._has_permission

    @property
    def role_changed(self) -> bool:
        return self._role_changed

    def set_network_id(self, net_id: int) -> None:
        self.network_id = net_id

    def clear_network_id(self) -> None:
        self.network_id = None

    def clear_role_changed(self) -> None:
        self._role_changed = False

    def _emit(self, text: str, end: str = "\n") -> None:
        print(text, end=end, file=self._out)

    def update_sensors(self, ax, ay, az, gx, gy, gz, altitude, battery_voltage) -> None:
        """Store the latest sensor readings in the telemetry packet."""
        tlm = self.telemetry
        tlm.drone_id = self.self_id
        tlm.timestamp = _now32(self._clock)
        tlm.acceleration_x = ax
        tlm.acceleration_y = ay
        tlm.acceleration_z = az
        tlm.gyroscope_x = gx
        tlm.gyroscope_y = gy
        tlm.gyroscope_z = gz
        tlm.battery_voltage = battery_voltage
        tlm.altitude = altitude

    def send_telemetry(self) -> bool:
        """Send telemetry once if permission was granted; True when acknowledged."""
        if not self._has_permission:
            return False
        self.total_sends += 1
        success = self.radio.send(self.telemetry.pack())
        if not success:
            self.failed_sends += 1
        self.telemetry.retries = self.radio.get_arc()
        self.telemetry.link_quality = 100.0 * (1.0 - self.failed_sends / self.total_sends)
        self._has_permission = False
        return success

    def _poll_radio(self) -> None:
        while (peek := self.radio.receive(1, peek_only=True)) is not None:
            type_byte = peek[0]
            data = self.radio.receive(packet_size(type_byte)) or b""
            self.telemetry.rpd = 1 if self.radio.test_rpd() else 0
            self._rx_queue.append(_RawPacket(type_byte, data))

    def handle_incoming(self) -> None:
        """Drain the radio and react to every packet received."""
        self._poll_radio()
        while self._rx_queue:
            raw = self._rx_queue.popleft()
            try:
                kind = PacketType(raw.type_byte)
            except ValueError:
                continue
            if kind is PacketType.UNDEFINED:
                self._handle_undefined()
            elif kind is PacketType.COMMAND:
                self._handle_command(CommandPacket.unpack(raw.data))
            elif kind is PacketType.PERMISSION_TO_SEND:
                perm = PermissionToSendPacket.unpack(raw.data)
                if perm.target_drone_id == self.self_id:
                    self._has_permission = True
            elif kind is PacketType.LEADER_ANNOUNCEMENT:
                self._handle_leader_announcement(LeaderAnnouncementPacket.unpack(raw.data))
            elif kind is PacketType.JOIN_RESPONSE:
                self._handle_join_response(JoinResponsePacket.unpack(raw.data))
            elif kind is PacketType.TELEMETRY:
                self._handle_telemetry(TelemetryPacket.unpack(raw.data))
            elif kind is PacketType.HEARTBEAT:
                self._handle_heartbeat(HeartbeatPacket.unpack(raw.data))
            elif kind is PacketType.LEADER_REQUEST:
                self._handle_leader_request(LeaderRequestPacket.unpack(raw.data))

    def _handle_command(self, cmd: CommandPacket) -> None:
        if cmd.target_drone_id != self.self_id:
            return
        age = (_now32(self._clock) - cmd.timestamp) & 0xFFFFFFFF
        if age > COMMAND_MAX_AGE:
            return
        self._emit(f"[Komut] {cmd.command}")

    def _handle_leader_announcement(self, ann: LeaderAnnouncementPacket) -> None:
        was_leader = self.is_leader
        self.is_leader = ann.new_leader_id == self.self_id
        self.current_leader_id = ann.new_leader_id
        if was_leader != self.is_leader:
            self._role_changed = True

    def _handle_join_response(self, resp: JoinResponsePacket) -> None:
        self._emit(
            f"[JoinResponse] ID {resp.assigned_id} Channel {resp.assigned_channel}"
            f" Leader {resp.current_leader_id}"
        )

    def _handle_telemetry(self, tlm: TelemetryPacket) -> None:
        self._emit(f"[Telemetry] Drone {tlm.drone_id} Altitude {tlm.altitude:g}")

    def _handle_heartbeat(self, hb: HeartbeatPacket) -> None:
        self._emit(f"[Heartbeat] from {hb.source_drone_id}")

    def _handle_leader_request(self, req: LeaderRequestPacket) -> None:
        self._emit(f"[LeaderRequest] from {req.drone_id}")

    def _handle_undefined(self) -> None:
        self.undefined_received += 1
        self._emit("UNDEFINED MESSAGE COME")

    def drone_info(self) -> str:
        """A short human-readable summary of this drone."""
        net = str(self.network_id) if self.network_id is not None else "(atanmamış)"
        return (
            "=== Drone Bilgileri ===\n"
            f"Temp ID: {self.temp_id}\n"
            f"Net ID : {net}\n"
            f"İsim   : {self.name}\n"
            f"Lider? : {'Evet' if self.is_leader else 'Hayır'}\n"
        )

    def print_drone_info(self) -> str:
        """Write the summary to the drone's output stream and return it."""
        text = self.drone_info()
        self._emit(text, end="")
        return text