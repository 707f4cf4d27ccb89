from collections import deque

import pytest

from swarmlink.packets import (
    CommandPacket,
    HeartbeatPacket,
    JoinRequestPacket,
    JoinResponsePacket,
    LeaderAnnouncementPacket,
    LeaderRequestPacket,
    PacketType,
    PermissionToSendPacket,
    TelemetryPacket,
    decode_packet,
    packet_size,
)
from swarmlink.radio import RadioDataRate, RadioInterface

ADDR_A_TX = 0xF0F0F0F0AA
ADDR_B_TX = 0xF0F0F0F0BB


class FakeAir:
    def __init__(self):
        self.nodes = []

    def transmit(self, address, payload):
        delivered = False
        for node in self.nodes:
            if node.listening and address in node.pipes.values():
                node.inbox.append(bytes(payload))
                delivered = True
        return delivered


class FakeTransceiver:
    def __init__(self, air=None, begin_ok=True):
        self.air = air if air is not None else FakeAir()
        self.air.nodes.append(self)
        self.begin_ok = begin_ok
        self.calls = []
        self.listening = False
        self.pipes = {}
        self.writing = None
        self.inbox = deque()
        self.pa = None
        self.channel = None
        self.rate = None
        self.auto_ack = None
        self.rpd = False
        self.arc = 0

    def begin(self):
        self.calls.append("begin")
        return self.begin_ok

    def set_pa_level(self, level):
        self.pa = level

    def start_listening(self):
        self.calls.append("start_listening")
        self.listening = True

    def stop_listening(self):
        self.calls.append("stop_listening")
        self.listening = False

    def open_writing_pipe(self, address):
        self.writing = address

    def open_reading_pipe(self, pipe, address):
        self.pipes[pipe] = address

    def set_channel(self, channel):
        self.channel = channel

    def set_data_rate(self, rate):
        self.rate = rate

    def set_auto_ack(self, enable):
        self.auto_ack = enable

    def enable_dynamic_payloads(self):
        self.calls.append("dynamic")

    def enable_ack_payload(self):
        self.calls.append("ack_payload")

    def write(self, data):
        self.calls.append("write")
        return self.air.transmit(self.writing, data)

    def available(self):
        return bool(self.inbox)

    def read(self, size):
        return self.inbox.popleft()[:size]

    def carrier_detected(self):
        return self.rpd

    test_rpd = carrier_detected

    def get_arc(self):
        return self.arc


def duplex_radio(air=None):
    air = air if air is not None else FakeAir()
    return RadioInterface(FakeTransceiver(air), FakeTransceiver(air))


def test_begin_full_duplex():
    radio = duplex_radio()
    assert radio.begin() is True
    assert radio.full_duplex is True
    assert radio.tx_radio.pa == 3 and radio.rx_radio.pa == 3
    assert radio.rx_radio.listening is True


def test_begin_single_stops_listening():
    radio = RadioInterface(FakeTransceiver())
    assert radio.begin() is True
    assert radio.full_duplex is False
    assert radio.tx_radio.calls[-1] == "stop_listening"


def test_begin_failure():
    air = FakeAir()
    assert RadioInterface(FakeTransceiver(air, begin_ok=False)).begin() is False
    bad_rx = RadioInterface(FakeTransceiver(air), FakeTransceiver(air, begin_ok=False))
    assert bad_rx.begin() is False


def test_set_address_full_duplex():
    radio = duplex_radio()
    radio.set_address(ADDR_A_TX, ADDR_B_TX)
    assert radio.tx_radio.writing == ADDR_A_TX
    assert radio.rx_radio.pipes == {1: ADDR_B_TX}
    assert radio.tx_radio.pipes == {}
    assert (radio.tx_address, radio.rx_address) == (ADDR_A_TX, ADDR_B_TX)


def test_set_address_single():
    radio = RadioInterface(FakeTransceiver())
    radio.set_address(ADDR_A_TX, ADDR_B_TX)
    assert radio.tx_radio.pipes == {1: ADDR_B_TX}


def test_open_listening_pipe():
    radio = duplex_radio()
    radio.open_listening_pipe(2, 0xABCDEF)
    assert radio.rx_radio.pipes == {2: 0xABCDEF}


def test_configure_sets_both_modules():
    radio = duplex_radio()
    radio.configure(90, RadioDataRate.HIGH_RATE)
    for module in (radio.tx_radio, radio.rx_radio):
        assert module.channel == 90
        assert module.rate is RadioDataRate.HIGH_RATE
        assert module.auto_ack is True
        assert "dynamic" in module.calls and "ack_payload" in module.calls
    assert radio.rx_radio.listening is True


def test_configure_defaults():
    radio = RadioInterface(FakeTransceiver())
    radio.configure()
    assert radio.tx_radio.channel == 1
    assert radio.tx_radio.rate is RadioDataRate.MEDIUM_RATE
    assert radio.tx_radio.listening is True


def test_single_send_toggles_listening():
    radio = RadioInterface(FakeTransceiver())
    radio.configure()
    radio.tx_radio.calls.clear()
    radio.send(b"x")
    assert radio.tx_radio.calls == ["stop_listening", "write", "start_listening"]


def test_duplex_exchange_between_two_drones():
    air = FakeAir()
    radio_a = duplex_radio(air)
    radio_b = duplex_radio(air)
    assert radio_a.begin() and radio_b.begin()
    radio_a.configure(90, RadioDataRate.MEDIUM_RATE)
    radio_b.configure(90, RadioDataRate.MEDIUM_RATE)
    radio_a.set_address(ADDR_A_TX, ADDR_B_TX)
    radio_b.set_address(ADDR_B_TX, ADDR_A_TX)

    got_a, got_b = [], []
    for _ in range(3):
        assert radio_a.send(b"DroneA\0") is True
        assert radio_b.send(b"DroneB\0") is True
        got_a.append(radio_a.receive(32))
        got_b.append(radio_b.receive(32))

    assert all(msg.split(b"\0")[0] == b"DroneB" for msg in got_a)
    assert all(msg.split(b"\0")[0] == b"DroneA" for msg in got_b)
    assert all(len(msg) == 32 for msg in got_a + got_b)


def test_packets_loopback():
    radio = duplex_radio()
    assert radio.begin()
    radio.configure(90, RadioDataRate.MEDIUM_RATE)
    radio.set_address(ADDR_A_TX, ADDR_A_TX)

    sent = [
        CommandPacket(target_drone_id=1, timestamp=1, command="test"),
        TelemetryPacket(drone_id=2, timestamp=2, altitude=100.0),
        JoinRequestPacket(timestamp=3, temp_id=3, requested_name="node"),
        JoinResponsePacket(
            assigned_id=4, current_leader_id=1, assigned_channel=90, timestamp=4
        ),
        HeartbeatPacket(source_drone_id=5, timestamp=5),
        LeaderAnnouncementPacket(new_leader_id=2, timestamp=6),
        PermissionToSendPacket(target_drone_id=6, timestamp=7),
        LeaderRequestPacket(drone_id=7, timestamp=8),
    ]
    for pkt in sent:
        radio.send(pkt.pack())
    radio.send(bytes([PacketType.UNDEFINED]))

    received = []
    while len(received) < 9:
        peek = radio.receive(1, peek_only=True)
        assert peek is not None
        data = radio.receive(packet_size(peek[0]))
        received.append(decode_packet(data))

    assert received[:8] == sent
    assert received[8] is None
    assert radio.receive(1) is None


def test_telemetry_send_and_receive():
    air = FakeAir()
    sender = RadioInterface(FakeTransceiver(air))
    receiver = RadioInterface(FakeTransceiver(air))
    for radio in (sender, receiver):
        radio.begin()
        radio.configure(1, RadioDataRate.MEDIUM_RATE)
    sender.set_address(0xF0F0F0F0D2, 0xF0F0F0F0E1)
    receiver.set_address(0xF0F0F0F0E1, 0xF0F0F0F0D2)

    pkt = TelemetryPacket(drone_id=1, timestamp=10, battery_voltage=3.3)
    assert sender.send(pkt.pack()) is True
    peek = receiver.receive(1, peek_only=True)
    assert peek == bytes([PacketType.TELEMETRY])
    got = TelemetryPacket.unpack(receiver.receive(TelemetryPacket.SIZE))
    assert got.drone_id == 1
    assert got.battery_voltage == pytest.approx(3.3, rel=1e-6)


def test_peek_keeps_packet_until_read():
    radio = duplex_radio()
    radio.begin()
    radio.set_address(ADDR_A_TX, ADDR_A_TX)
    data = HeartbeatPacket(source_drone_id=3, timestamp=9).pack()
    radio.send(data)
    assert radio.receive(1, peek_only=True) == data[:1]
    assert radio.receive(1, peek_only=True) == data[:1]
    assert radio.receive(6) == data
    assert radio.receive(6) is None


def test_receive_empty_returns_none():
    radio = duplex_radio()
    radio.begin()
    assert radio.receive(1, peek_only=True) is None
    assert radio.receive(4) is None


def test_size_limits():
    radio = duplex_radio()
    with pytest.raises(ValueError):
        radio.send(bytes(33))
    with pytest.raises(ValueError):
        radio.receive(33)


def test_rpd_and_arc_come_from_right_module():
    radio = duplex_radio()
    radio.rx_radio.rpd = True
    radio.tx_radio.arc = 7
    assert radio.test_rpd() is True
    assert radio.get_arc() == 7
    single = RadioInterface(FakeTransceiver())
    single.tx_radio.rpd = True
    assert single.test_rpd() is True