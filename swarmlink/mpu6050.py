"""Reading an MPU6050 accelerometer and gyroscope over Linux I2C."""

from __future__ import annotations

import fcntl
import os
import struct

I2C_SLAVE = 0x0703
DEFAULT_DEVICE = "/dev/i2c-1"
DEFAULT_ADDRESS = 0x68

PWR_MGMT_1 = 0x6B
ACCEL_XOUT_H = 0x3B
GYRO_XOUT_H = 0x43

_AXES = struct.Struct(">hhh")


class SensorError(OSError):
    """Raised when the sensor cannot be opened or read."""


def decode_axes(data) -> tuple[int, int, int]:
    """Decode three big-endian signed 16-bit readings."""
    data = bytes(data)
    if len(data) != _AXES.size:
        raise SensorError(f"expected {_AXES.size} bytes, got {len(data)}")
    return _AXES.unpack(data)


class Mpu6050:
    """An MPU6050 attached to an I2C bus device."""

    def __init__(self) -> None:
        self._fd = -1
        self.address = DEFAULT_ADDRESS

    @property
    def is_open(self) -> bool:
        return self._fd >= 0

    def init(self, device: str = DEFAULT_DEVICE, addr: int = DEFAULT_ADDRESS) -> None:
        """Open the bus, select the sensor and wake it from sleep."""
        self.close()
        self.address = addr
        try:
            fd = os.open(device, os.O_RDWR)
        except OSError as exc:
            raise SensorError(f"cannot open {device}: {exc}") from exc
        try:
            fcntl.ioctl(fd, I2C_SLAVE, addr)
            if os.write(fd, bytes([PWR_MGMT_1, 0x00])) != 2:
                raise SensorError("short write while waking the sensor")
        except OSError as exc:
            os.close(fd)
            if isinstance(exc, SensorError):
                raise
            raise SensorError(f"cannot set up sensor at {addr:#x}: {exc}") from exc
        self._fd = fd

    def _read_registers(self, register: int, length: int) -> bytes:
        if self._fd < 0:
            raise SensorError("sensor is not initialised")
        try:
            if os.write(self._fd, bytes([register])) != 1:
                raise SensorError("short write selecting register")
            data = os.read(self._fd, length)
        except SensorError:
            raise
        except OSError as exc:
            raise SensorError(f"register read failed: {exc}") from exc
        if len(data) != length:
            raise SensorError(f"expected {length} bytes, got {len(data)}")
        return data

    def read_acceleration(self) -> tuple[int, int, int]:
        """Raw accelerometer readings (x, y, z)."""
        return decode_axes(self._read_registers(ACCEL_XOUT_H, _AXES.size))

    def read_gyro(self) -> tuple[int, int, int]:
        """Raw gyroscope readings (x, y, z)."""
        return decode_axes(self._read_registers(GYRO_XOUT_H, _AXES.size))

    def close(self) -> None:
        """Release the bus device; safe to call more than once."""
        if self._fd >= 0:
            os.close(self._fd)
            self._fd = -1

    def __enter__(self) -> "Mpu6050":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()