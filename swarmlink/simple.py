"""A minimal drone that streams motion readings and follows leader messages."""

from __future__ import annotations

import itertools
import random
import re
import struct
import time
from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from .packets import PAYLOAD_SIZE, PacketError
from .radio import RadioDataRate, RadioInterface

BASE_TX = 0xF0F0F0F0D2
BASE_RX = 0xF0F0F0F0E1
CHANNEL = 1
SEND_INTERVAL = 0.2

_LEADER_STATE = re.compile(r"\s*([0-9]+)\s*Leader\s*=\s*(\S{1,5})")
_LEADER_ID = re.compile(r"LEADER\s*=\s*([0-9]+)")


@dataclass
class SimplePacket:
    """Motion readings with the sender's id, signal strength and leader flag."""

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<Bx6hb?")
    SIZE: ClassVar[int] = _STRUCT.size

    drone_id: int = 0
    accel_x: int = 0
    accel_y: int = 0
    accel_z: int = 0
    gyro_x: int = 0
    gyro_y: int = 0
    gyro_z: int = 0
    rssi: int = 0
    leader: bool = False

    def pack(self) -> bytes:
        """Encode the packet into its wire bytes."""
        try:
            return self._STRUCT.pack(
                self.drone_id,
                self.accel_x,
                self.accel_y,
                self.accel_z,
                self.gyro_x,
                self.gyro_y,
                self.gyro_z,
                self.rssi,
                bool(self.leader),
            )
        except struct.error as exc:
            raise PacketError(f"cannot encode SimplePacket: {exc}") from exc

    @classmethod
    def unpack(cls, data) -> "SimplePacket":
        """Decode a packet from the start of ``data``."""
        data = bytes(data)
        if len(data) < cls.SIZE:
            raise PacketError(f"SimplePacket needs {cls.SIZE} bytes, got {len(data)}")
        return cls(*cls._STRUCT.unpack_from(data))


def parse_leader_message(text: Union[str, bytes], drone_id: int, current: bool) -> bool:
    """The leader state after a message like ``"1 Leader = True"`` or ``"LEADER = 1"``.

    A message that matches neither form leaves ``current`` unchanged.
    """
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).split(b"\0", 1)[0].decode("latin-1")
    else:
        text = text.split("\0", 1)[0]

    match = _LEADER_STATE.match(text)
    if match:
        if int(match.group(1)) != drone_id:
            return False
        return match.group(2) in ("True", "true")

    match = _LEADER_ID.match(text)
    if match:
        return int(match.group(1)) == drone_id
    return current


def _read_motion(sensor) -> tuple[tuple[int, int, int], tuple[int, int, int]]:
    if sensor is not None:
        try:
            return sensor.read_acceleration(), sensor.read_gyro()
        except OSError:
            pass
    accel = tuple(random.randint(-100, 100) for _ in range(3))
    gyro = tuple(random.randint(-100, 100) for _ in range(3))
    return accel, gyro


def run_simple(
    radio: RadioInterface,
    sensor=None,
    drone_id: int = 1,
    iterations: Optional[int] = None,
) -> bool:
    """Stream readings and track leadership; returns the final leader state.

    Runs forever when ``iterations`` is None.
    """
    if not radio.begin():
        raise RuntimeError("radio failed to start")
    radio.configure(CHANNEL, RadioDataRate.MEDIUM_RATE)
    radio.set_address(BASE_TX, BASE_RX)

    is_leader = False
    rounds = itertools.count() if iterations is None else range(iterations)
    for _ in rounds:
        accel, gyro = _read_motion(sensor)
        packet = SimplePacket(
            drone_id,
            *accel,
            *gyro,
            rssi=random.randint(-75, -70),
            leader=is_leader,
        )
        radio.send(packet.pack())

        if radio.receive(PAYLOAD_SIZE, peek_only=True) is not None:
            message = radio.receive(PAYLOAD_SIZE)
            if message is not None:
                is_leader = parse_leader_message(
                    message[: PAYLOAD_SIZE - 1], drone_id, is_leader
                )

        time.sleep(SEND_INTERVAL)
    return is_leader