"""A radio link over one or two packet transceivers.

With one transceiver the link is half duplex: it listens except while
sending.  With a second transceiver dedicated to receiving it is full duplex.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Protocol

from .packets import PAYLOAD_SIZE

_PA_MAX = 3


class RadioDataRate(Enum):
    """Air data rate, valued in kbit/s."""

    LOW_RATE = 250
    MEDIUM_RATE = 1000
    HIGH_RATE = 2000


class Transceiver(Protocol):
    """The operations a packet radio module must offer."""

    def begin(self) -> bool: ...
    def set_pa_level(self, level: int) -> None: ...
    def start_listening(self) -> None: ...
    def stop_listening(self) -> None: ...
    def open_writing_pipe(self, address: int) -> None: ...
    def open_reading_pipe(self, pipe: int, address: int) -> None: ...
    def set_channel(self, channel: int) -> None: ...
    def set_data_rate(self, rate: RadioDataRate) -> None: ...
    def set_auto_ack(self, enable: bool) -> None: ...
    def enable_dynamic_payloads(self) -> None: ...
    def enable_ack_payload(self) -> None: ...
    def write(self, data: bytes) -> bool: ...
    def available(self) -> bool: ...
    def read(self, size: int) -> bytes: ...
    def test_rpd(self) -> bool: ...
    def get_arc(self) -> int: ...


class RadioInterface:
    """Sends and receives fixed-size payloads, with one-packet peeking."""

    def __init__(self, tx: Transceiver, rx: Optional[Transceiver] = None) -> None:
        self.tx_radio = tx
        self.rx_radio = rx
        self.tx_address = 0
        self.rx_address = 0
        self._cached: Optional[bytes] = None

    @property
    def full_duplex(self) -> bool:
        return self.rx_radio is not None

    @property
    def _listener(self) -> Transceiver:
        return self.rx_radio if self.rx_radio is not None else self.tx_radio

    def begin(self) -> bool:
        """Start the transceivers at maximum power; False if one fails."""
        if not self.tx_radio.begin():
            return False
        self.tx_radio.set_pa_level(_PA_MAX)
        if self.rx_radio is not None:
            if not self.rx_radio.begin():
                return False
            self.rx_radio.set_pa_level(_PA_MAX)
            self.rx_radio.start_listening()
        else:
            self.tx_radio.stop_listening()
        return True

    def set_address(self, tx: int, rx: int) -> None:
        """Set the address written to and the address read on pipe 1."""
        self.tx_address = tx
        self.rx_address = rx
        self.tx_radio.open_writing_pipe(tx)
        self._listener.open_reading_pipe(1, rx)

    def open_listening_pipe(self, pipe: int, address: int) -> None:
        self._listener.open_reading_pipe(pipe, address)

    def configure(
        self, channel: int = 1, datarate: RadioDataRate = RadioDataRate.MEDIUM_RATE
    ) -> None:
        """Set channel and data rate, enable acks and dynamic payloads, then listen."""
        radios = [self.tx_radio]
        if self.rx_radio is not None:
            radios.append(self.rx_radio)
        for radio in radios:
            radio.set_channel(channel)
            radio.set_data_rate(datarate)
            radio.set_auto_ack(True)
            radio.enable_dynamic_payloads()
            radio.enable_ack_payload()
        self._listener.start_listening()

    def send(self, data: bytes) -> bool:
        """Transmit one payload; True when it was acknowledged."""
        data = bytes(data)
        if len(data) > PAYLOAD_SIZE:
            raise ValueError(f"payload of {len(data)} bytes exceeds {PAYLOAD_SIZE}")
        if self.rx_radio is not None:
            return self.tx_radio.write(data)
        self.tx_radio.stop_listening()
        success = self.tx_radio.write(data)
        self.tx_radio.start_listening()
        return success

    def receive(self, size: int, peek_only: bool = False) -> Optional[bytes]:
        """The first ``size`` bytes of the next payload, or None if none waits.

        A peek keeps the payload so that the next call returns it again.
        """
        if not 0 <= size <= PAYLOAD_SIZE:
            raise ValueError(f"size must be between 0 and {PAYLOAD_SIZE}")
        if self._cached is not None:
            packet = self._cached
            if not peek_only:
                self._cached = None
            return packet[:size]
        rx = self._listener
        if not rx.available():
            return None
        packet = bytes(rx.read(PAYLOAD_SIZE))[:PAYLOAD_SIZE].ljust(PAYLOAD_SIZE, b"\0")
        if peek_only:
            self._cached = packet
        return packet[:size]

    def test_rpd(self) -> bool:
        """Whether the receiving module sensed a strong carrier."""
        return self._listener.test_rpd()

    def get_arc(self) -> int:
        """Retransmission count of the last send."""
        return self.tx_radio.get_arc()