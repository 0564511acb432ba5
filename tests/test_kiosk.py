import io

from stadium_gates.clock import SimClock
from stadium_gates.config import SimulationConfig
from stadium_gates.kiosk import Kiosk, parse_serial, render_result
from stadium_gates.manager import GateManager
from stadium_gates.state import PersonStatus


def make_kiosk():
    m = GateManager(SimulationConfig(), clock=SimClock(time_fn=lambda: 0.0))
    m.init_population()
    out = io.StringIO()
    return Kiosk(m, out=out), m, out


def test_parse_serial_strips_offset():
    assert parse_serial("1000005", offset=1_000_000) == 5
    assert parse_serial(" 999999 ", offset=1_000_000) == -1
    assert parse_serial("abc", offset=1_000_000) is None


def test_kiosk_conversation():
    kiosk, m, out = make_kiosk()

    handled = kiosk.run(io.StringIO("1000005\n1000005\n9999999\n1000000\nabc\n1000003\n"))

    assert handled == 4
    text = out.getvalue()
    assert "Estimated waiting time: 1 minutes" in text
    assert "Recommended gate(s): 1 2" in text
    assert "You have been assigned to Gate 1." in text
    assert "Already queued at gate 1; switching is disabled." in text
    assert "Serial must be between 1000000 and 1000009." in text
    assert "Already entered the stadium; re-entry not allowed." in text
    # input stopped at "abc"
    assert m.people[3].status is PersonStatus.NOT_ARRIVED
    assert [r.outcome for r in kiosk.results] == ["queued", "already_queued", "invalid", "already_entered"]


def test_kiosk_closes_at_end_of_stream():
    kiosk, m, out = make_kiosk()
    assert kiosk.run(io.StringIO("1000001 1000002")) == 2
    assert m.snapshot_lengths() == [1, 1]


def test_render_vip():
    kiosk, m, _ = make_kiosk()
    m.people[0].status = PersonStatus.NOT_ARRIVED
    assert render_result(m.admit(0)) == ["VIP detected! You may enter immediately."]


def test_banner_shows_serial_range():
    kiosk, _, out = make_kiosk()
    kiosk.banner()
    assert "Enter serials between 1000000 and 1000009" in out.getvalue()
