import pytest

from sonar.onion import OnionStore, SweepDetector


def _feed(seq):
    det = SweepDetector()
    return [det.update(a) for a in seq]


def test_increasing_wrap_fires_once():
    hits = _feed([170, 175, 178, 3, 8])
    assert hits == [False, False, False, True, False]


def test_decreasing_wrap_fires_once():
    hits = _feed([8, 3, 178, 170])
    assert hits == [False, False, True, False]


def test_middle_of_arc_never_fires():
    seq = list(range(20, 151, 3)) + list(range(150, 19, -4))
    assert not any(_feed(seq * 5))


def test_wrap_against_direction_is_ignored():
    # travelling down, a 178 → 3 jump is not a completed sweep
    assert _feed([60, 40, 30, 8, 3]) == [False] * 5
    det = SweepDetector()
    det.direction = -1
    det.update(178)
    assert det.update(3) is False


def test_wrap_jump_does_not_flip_direction():
    det = SweepDetector()
    for a in (170, 175, 178, 3):
        det.update(a)
    assert det.direction == 1


def test_single_degree_steps_keep_direction():
    det = SweepDetector()
    for a in (100, 99, 98, 97):
        det.update(a)
    assert det.direction == 1
    det.update(90)
    assert det.direction == -1


def test_reset_forgets_previous():
    det = SweepDetector()
    det.update(178)
    det.reset()
    assert det.update(3) is False


def test_store_keeps_newest_first_and_drops_oldest():
    store = OnionStore(depth=3)
    for i in range(5):
        store.capture([float(i)] * 4)
    assert len(store) == 3
    assert [layer[0] for layer in store.layers] == [4.0, 3.0, 2.0]


def test_layers_are_frozen_copies():
    store = OnionStore(depth=2)
    live = [1.0, None, 2.0]
    store.capture(live)
    live[0] = 99.0
    assert store.layers[0] == (1.0, None, 2.0)


def test_sector_mask():
    store = OnionStore(depth=2)
    layer = store.capture([5.0] * 10, sector=(3, 6))
    assert layer == (None, None, None, 5.0, 5.0, 5.0, 5.0, None, None, None)


def test_resize_trims_oldest():
    store = OnionStore(depth=5)
    for i in range(5):
        store.capture([float(i)])
    store.resize(2)
    assert [layer[0] for layer in store.layers] == [4.0, 3.0]


def test_alphas_fade_linearly_to_floor():
    store = OnionStore(depth=3)
    for i in range(3):
        store.capture([float(i)])
    alphas = [a for a, _ in store.alphas(0.2)]
    assert alphas == pytest.approx([1.0, 0.6, 0.2])


def test_single_layer_is_fully_opaque():
    store = OnionStore(depth=3)
    store.capture([1.0])
    assert [a for a, _ in store.alphas(0.2)] == [1.0]


def test_store_honours_any_depth_it_is_given():
    store = OnionStore(depth=25)
    for i in range(30):
        store.capture([float(i)])
    assert len(store) == 25
