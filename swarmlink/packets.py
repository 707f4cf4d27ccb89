"""Wire formats of the swarm radio protocol.

Every packet is a packed little-endian record whose first byte is its
:class:`PacketType`.  No packet is larger than one radio payload.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field, fields
from enum import IntEnum
from typing import ClassVar, Optional, Union

MAX_COMMAND_LENGTH = 20
MAX_NODE_NAME_LENGTH = 20
PAYLOAD_SIZE = 32


class PacketError(ValueError):
    """Raised when a packet cannot be encoded or decoded."""


class PacketType(IntEnum):
    UNDEFINED = 0
    JOIN_REQUEST = 1
    JOIN_RESPONSE = 2
    COMMAND = 3
    TELEMETRY = 4
    HEARTBEAT = 5
    LEADER_ANNOUNCEMENT = 6
    PERMISSION_TO_SEND = 7
    LEADER_REQUEST = 8


def _text(width: int):
    return field(default="", metadata={"width": width})


class _Packet:
    """Shared encoding for the fixed-layout packets."""

    PACKET_TYPE: ClassVar[PacketType]
    SIZE: ClassVar[int]
    _BODY = ""
    _STRUCT: ClassVar[struct.Struct]

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls._STRUCT = struct.Struct("<B" + cls._BODY)
        cls.SIZE = cls._STRUCT.size

    def _encode(self) -> bytes:
        values = []
        for f in fields(self):
            value = getattr(self, f.name)
            if "width" in f.metadata:
                encoded = str(value).encode("utf-8")
                if len(encoded) > f.metadata["width"]:
                    raise PacketError(
                        f"{f.name} is longer than {f.metadata['width']} bytes"
                    )
                value = encoded
            values.append(value)
        try:
            return self._STRUCT.pack(int(self.PACKET_TYPE), *values)
        except struct.error as exc:
            raise PacketError(f"cannot encode {type(self).__name__}: {exc}") from exc

    @classmethod
    def _decode(cls, data):
        data = bytes(data)
        if len(data) < cls.SIZE:
            raise PacketError(
                f"{cls.__name__} needs {cls.SIZE} bytes, got {len(data)}"
            )
        raw = cls._STRUCT.unpack_from(data)
        if raw[0] != cls.PACKET_TYPE:
            raise PacketError(
                f"type byte {raw[0]} does not match {cls.PACKET_TYPE.name}"
            )
        values = [
            v.split(b"\0", 1)[0].decode("utf-8", errors="replace")
            if isinstance(v, bytes)
            else v
            for v in raw[1:]
        ]
        return cls(*values)


@dataclass
class CommandPacket(_Packet):
    PACKET_TYPE: ClassVar[PacketType] = PacketType.COMMAND
    _BODY = f"BI{MAX_COMMAND_LENGTH}s"

    target_drone_id: int = 0
    timestamp: int = 0
    command: str = _text(MAX_COMMAND_LENGTH)

    def pack(self) -> bytes:
        """Encode the packet into its wire bytes."""
        return self._encode()

    @classmethod
    def unpack(cls, data) -> "CommandPacket":
        """Decode a packet from the start of ``data``."""
        return cls._decode(data)


@dataclass
class TelemetryPacket(_Packet):
    PACKET_TYPE: ClassVar[PacketType] = PacketType.TELEMETRY
    _BODY = "BI6hffBBf"

    drone_id: int = 0
    timestamp: int = 0
    acceleration_x: int = 0
    acceleration_y: int = 0
    acceleration_z: int = 0
    gyroscope_x: int = 0
    gyroscope_y: int = 0
    gyroscope_z: int = 0
    battery_voltage: float = 0.0
    altitude: float = 0.0
    rpd: int = 0
    retries: int = 0
    link_quality: float = 0.0

    def pack(self) -> bytes:
        """Encode the packet into its wire bytes."""
        return self._encode()

    @classmethod
    def unpack(cls, data) -> "TelemetryPacket":
        """Decode a packet from the start of ``data``."""
        return cls._decode(data)


@dataclass
class JoinRequestPacket(_Packet):
    PACKET_TYPE: ClassVar[PacketType] = PacketType.JOIN_REQUEST
    _BODY = f"IB{MAX_NODE_NAME_LENGTH}s"

    timestamp: int = 0
    temp_id: int = 0
    requested_name: str = _text(MAX_NODE_NAME_LENGTH)

    def pack(self) -> bytes:
        """Encode the packet into its wire bytes."""
        return self._encode()

    @classmethod
    def unpack(cls, data) -> "JoinRequestPacket":
        """Decode a packet from the start of ``data``."""
        return cls._decode(data)


@dataclass
class JoinResponsePacket(_Packet):
    PACKET_TYPE: ClassVar[PacketType] = PacketType.JOIN_RESPONSE
    _BODY = "BBBI"

    assigned_id: int = 0
    current_leader_id: int = 0
    assigned_channel: int = 0
    timestamp: int = 0

    def pack(self) -> bytes:
        """Encode the packet into its wire bytes."""
        return self._encode()

    @classmethod
    def unpack(cls, data) -> "JoinResponsePacket":
        """Decode a packet from the start of ``data``."""
        return cls._decode(data)


@dataclass
class HeartbeatPacket(_Packet):
    PACKET_TYPE: ClassVar[PacketType] = PacketType.HEARTBEAT
    _BODY = "BI"

    source_drone_id: int = 0
    timestamp: int = 0

    def pack(self) -> bytes:
        """Encode the packet into its wire bytes."""
        return self._encode()

    @classmethod
    def unpack(cls, data) -> "HeartbeatPacket":
        """Decode a packet from the start of ``data``."""
        return cls._decode(data)


@dataclass
class LeaderAnnouncementPacket(_Packet):
    PACKET_TYPE: ClassVar[PacketType] = PacketType.LEADER_ANNOUNCEMENT
    _BODY = "BI"

    new_leader_id: int = 0
    timestamp: int = 0

    def pack(self) -> bytes:
        """Encode the packet into its wire bytes."""
        return self._encode()

    @classmethod
    def unpack(cls, data) -> "LeaderAnnouncementPacket":
        """Decode a packet from the start of ``data``."""
        return cls._decode(data)


@dataclass
class PermissionToSendPacket(_Packet):
    PACKET_TYPE: ClassVar[PacketType] = PacketType.PERMISSION_TO_SEND
    _BODY = "BI"

    target_drone_id: int = 0
    timestamp: int = 0

    def pack(self) -> bytes:
        """Encode the packet into its wire bytes."""
        return self._encode()

    @classmethod
    def unpack(cls, data) -> "PermissionToSendPacket":
        """Decode a packet from the start of ``data``."""
        return cls._decode(data)


@dataclass
class LeaderRequestPacket(_Packet):
    PACKET_TYPE: ClassVar[PacketType] = PacketType.LEADER_REQUEST
    _BODY = "BI"

    drone_id: int = 0
    timestamp: int = 0

    def pack(self) -> bytes:
        """Encode the packet into its wire bytes."""
        return self._encode()

    @classmethod
    def unpack(cls, data) -> "LeaderRequestPacket":
        """Decode a packet from the start of ``data``."""
        return cls._decode(data)


_BY_TYPE = {
    cls.PACKET_TYPE: cls
    for cls in (
        CommandPacket,
        TelemetryPacket,
        JoinRequestPacket,
        JoinResponsePacket,
        HeartbeatPacket,
        LeaderAnnouncementPacket,
        PermissionToSendPacket,
        LeaderRequestPacket,
    )
}

AnyPacket = Union[
    CommandPacket,
    TelemetryPacket,
    JoinRequestPacket,
    JoinResponsePacket,
    HeartbeatPacket,
    LeaderAnnouncementPacket,
    PermissionToSendPacket,
    LeaderRequestPacket,
]


def packet_size(packet_type) -> int:
    """Size in bytes of a packet of the given type; one byte for anything else."""
    try:
        kind = PacketType(packet_type)
    except ValueError:
        return 1
    cls = _BY_TYPE.get(kind)
    return cls.SIZE if cls is not None else 1


def decode_packet(data) -> Optional[AnyPacket]:
    """Decode a packet by its type byte; ``None`` for an UNDEFINED packet."""
    data = bytes(data)
    if not data:
        raise PacketError("empty packet")
    try:
        kind = PacketType(data[0])
    except ValueError as exc:
        raise PacketError(f"unknown packet type {data[0]}") from exc
    if kind is PacketType.UNDEFINED:
        return None
    return _BY_TYPE[kind].unpack(data)