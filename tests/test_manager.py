import dataclasses

import pytest

from stadium_gates.clock import SimClock
from stadium_gates.config import SimulationConfig
from stadium_gates.errors import InvariantError
from stadium_gates.manager import ASSIGNED, ENTERED, INVALID, QUEUED, VIP, GateManager
from stadium_gates.state import PersonStatus


class FakeTime:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def make_manager(**overrides):
    t = FakeTime()
    cfg = SimulationConfig(**overrides)
    m = GateManager(cfg, clock=SimClock(tick_seconds=cfg.tick_seconds, time_fn=t))
    return m, t


def place(m, gate, *serials):
    """Put people straight into a gate queue (bypassing arrival rules)."""
    for s in serials:
        p = m.people[s]
        p.status = PersonStatus.QUEUED
        p.gate = gate
        p.arrival_time = 0
        m.gates[gate].queue.append(s)


def assert_conserved(m):
    census = m.census()
    assert census["not_arrived"] + census["queued"] + census["entered"] == m.config.population


def test_vip_enters_at_start():
    m, _ = make_manager()
    assert m.init_population() == 1
    vip = m.people[0]
    assert vip.status is PersonStatus.ENTERED
    assert (vip.arrival_time, vip.entry_time) == (0, 0)
    assert all(p.status is PersonStatus.NOT_ARRIVED for p in m.people[1:])
    assert m.counter.vip == 1
    assert not m.all_entered()


def test_seed_queues_half_the_crowd_reproducibly():
    m1, _ = make_manager()
    m1.init_population()
    assert m1.seed_queues() == 5

    m2, _ = make_manager()
    m2.init_population()
    m2.seed_queues()

    assert [list(g.queue) for g in m1.gates] == [list(g.queue) for g in m2.gates]
    queued = [p for p in m1.people if p.status is PersonStatus.QUEUED]
    assert len(queued) == 5
    assert 0 not in {p.serial for p in queued}
    for p in queued:
        assert p.serial in m1.gates[p.gate].queue
        assert p.arrival_time == 0
    assert_conserved(m1)


def test_distribute_evens_out_queues():
    m, _ = make_manager()
    m.init_population()
    place(m, 0, 1, 2, 3, 4, 5)

    moved = m.distribute()

    assert moved == 3
    lengths = m.snapshot_lengths()
    assert sum(lengths) == 5
    assert max(lengths) - min(lengths) <= 1
    for gate in m.gates:
        for s in gate.queue:
            assert m.people[s].gate == gate.index
    assert_conserved(m)


def test_prepare_leaves_balanced_queues():
    m, _ = make_manager(population=30, gates=4)
    m.prepare()
    lengths = m.snapshot_lengths()
    assert sum(lengths) == 15
    assert max(lengths) - min(lengths) <= 1
    assert_conserved(m)


def test_find_best_gate_picks_shortest():
    m, _ = make_manager()
    m.init_population()
    place(m, 0, 1, 2, 3)
    place(m, 1, 4)
    assert m.find_best_gate() == 1


def test_find_best_gate_ties_go_to_lowest_index():
    m, _ = make_manager(gates=3)
    m.init_population()
    place(m, 0, 1, 2)
    place(m, 1, 3)
    place(m, 2, 4)
    assert m.find_best_gate() == 1


def test_first_arrival_with_empty_gates():
    m, t = make_manager()
    m.init_population()
    t.now = 3.2

    result = m.admit(5)

    assert result.outcome == ASSIGNED
    assert result.estimated_wait == 1
    assert result.recommended == (0, 1)
    assert result.gate == 0
    person = m.people[5]
    assert person.status is PersonStatus.QUEUED
    assert person.arrival_time == 3
    assert list(m.gates[0].queue) == [5]


def test_estimated_wait_scales_with_shortest_queue():
    m, _ = make_manager(minutes_per_slot=3)
    m.init_population()
    place(m, 0, 1, 2, 3)
    place(m, 1, 4, 6)

    result = m.admit(5)

    assert result.estimated_wait == 6
    assert result.recommended == (1,)
    assert result.gate == 1


def test_re_entry_changes_nothing():
    m, _ = make_manager()
    m.init_population()
    m.admit(5)
    m.admit_tick()
    before = m.people_snapshot(), [list(g.queue) for g in m.gates], m.counter.entered

    result = m.admit(5)

    assert result.outcome == ENTERED
    assert result.error.code == "already_entered"
    assert (m.people_snapshot(), [list(g.queue) for g in m.gates], m.counter.entered) == before


def test_queued_person_cannot_switch_gate():
    m, _ = make_manager()
    m.init_population()
    place(m, 1, 7)

    result = m.admit(7)

    assert result.outcome == QUEUED
    assert result.gate == 1
    assert result.error.code == "already_queued"
    assert "gate 2" in result.error.message
    assert list(m.gates[1].queue) == [7]


@pytest.mark.parametrize("serial", [-1, 10, 999])
def test_out_of_range_serial_is_rejected(serial):
    m, _ = make_manager()
    m.init_population()
    before = m.people_snapshot()

    result = m.admit(serial)

    assert result.outcome == INVALID
    assert result.error.code == "invalid_serial"
    assert m.people_snapshot() == before


def test_late_vip_walks_straight_in():
    m, t = make_manager()
    m.init_population()
    m.people[0] = dataclasses.replace(m.people[0], status=PersonStatus.NOT_ARRIVED, arrival_time=-1, entry_time=-1)
    t.now = 4.0

    result = m.admit(0)

    assert result.outcome == VIP
    assert (m.people[0].arrival_time, m.people[0].entry_time) == (4, 4)
    assert m.people[0].status is PersonStatus.ENTERED
    assert sum(m.snapshot_lengths()) == 0


def test_admit_tick_lets_one_person_per_gate_in():
    m, t = make_manager()
    m.init_population()
    place(m, 0, 1, 2, 3)
    place(m, 1, 4, 5)
    t.now = 2.0

    assert m.admit_tick() == [1, 4]

    assert m.snapshot_lengths() == [2, 1]
    assert m.counter.entered == 2
    assert m.people[1].status is PersonStatus.ENTERED
    assert m.people[1].entry_time == 2
    assert_conserved(m)


def test_admit_tick_detects_corrupt_queue():
    m, _ = make_manager()
    m.init_population()
    m.gates[0].queue.append(3)  # never recorded as queued

    with pytest.raises(InvariantError):
        m.admit_tick()


def test_drain_sweep_queues_everyone_left_and_gates_drain():
    m, t = make_manager()
    m.prepare()
    missing = [p.serial for p in m.people if p.status is PersonStatus.NOT_ARRIVED]
    for s in missing[:-3]:
        m.admit(s)
    t.now = 5.0

    swept = m.assign_remaining()

    assert swept == missing[-3:]
    for s in swept:
        assert m.people[s].status is PersonStatus.QUEUED
        assert m.people[s].arrival_time == 5
    assert m.census()["not_arrived"] == 0
    assert_conserved(m)

    for _ in range(m.config.population):
        if m.all_entered():
            break
        t.now += 1.0
        m.admit_tick()
        assert_conserved(m)

    assert m.all_entered()
    assert m.counter.entered == m.config.population - m.counter.vip
    for p in m.people:
        assert p.status is PersonStatus.ENTERED
        assert p.entry_time >= p.arrival_time >= 0


def test_status_snapshot():
    m, _ = make_manager()
    m.init_population()
    place(m, 0, 1, 2)

    status = m.status()

    assert status["type"] == "status_response"
    assert status["gates"] == {"1": {"queue_len": 2}, "2": {"queue_len": 0}}
    assert status["vip"] == 1
    assert status["not_arrived"] == 7


def test_assigned_message_numbers_gates_from_one():
    m, _ = make_manager()
    m.init_population()
    msg = m.admit(5).to_message(serial_offset=1_000_000)
    assert msg == {
        "type": "assigned",
        "serial": 1_000_005,
        "minute": 0,
        "gate": 1,
        "estimated_wait": 1,
        "recommended": [1, 2],
    }
