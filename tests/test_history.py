from sonar.history import PingTracker, PlotRing, Trail


def test_ping_eviction_drops_oldest_keeps_order():
    t = PingTracker(max_pings=3)
    for a in range(5):
        t.add(a, 10.0)
    assert [p.angle for p in t] == [2, 3, 4]


def test_ping_decay_removes_dead():
    t = PingTracker()
    t.add(1, 5.0, life=10)
    t.add(2, 5.0, life=20)
    t.decay(6)
    assert [(p.angle, p.life) for p in t] == [(1, 4), (2, 14)]
    t.decay(6)
    assert [p.angle for p in t] == [2]
    t.decay(8)
    assert len(t) == 0


def test_trail_newest_first_bounded():
    tr = Trail(depth=3)
    for i in range(5):
        tr.add((float(i), 0.0))
    assert [x for x, _ in tr] == [4.0, 3.0, 2.0]


def test_plot_ring_keeps_latest_in_order():
    ring = PlotRing(capacity=4)
    for v in range(6):
        ring.write(float(v))
    assert ring.ordered() == [2.0, 3.0, 4.0, 5.0]
    assert len(ring.buf) == 4
    assert ring.latest() == 5.0


def test_plot_ring_partially_filled():
    ring = PlotRing(capacity=4)
    ring.write(1.0)
    ring.write(2.0)
    assert ring.ordered() == [None, None, 1.0, 2.0]


def test_plot_ring_clear():
    ring = PlotRing(capacity=3)
    ring.write(1.0)
    ring.clear()
    assert ring.ordered() == [None, None, None]
    assert ring.cursor == 0
