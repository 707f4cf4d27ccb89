"""Drone swarm messaging: packet formats, radio link, MPU6050 sensor, drone roles and text columns."""

__version__ = "0.1.0"

__all__ = ["columns", "drone", "mpu6050", "packets", "radio", "simple", "swarm"]