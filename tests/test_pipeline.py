import pytest

from sonar.config import Settings
from sonar.constants import MAX_RANGE_CM, PING_LIFE, PING_RANGE_SLACK
from sonar.pipeline import SonarPipeline


@pytest.fixture
def pipe():
    return SonarPipeline(Settings())


def test_sample_line_feeds_every_structure(pipe):
    assert pipe.feed_line("90,40\n") is True
    assert pipe.slots.smoothed[90] == 40
    assert pipe.last_angle == 90 and pipe.last_distance == 40
    assert [(p.angle, p.distance, p.life) for p in pipe.pings] == [(90, 40, PING_LIFE)]
    assert len(pipe.trail) == 1
    x, y = next(iter(pipe.trail))
    assert x == pytest.approx(0, abs=1e-9) and y == pytest.approx(40)
    assert pipe.plot.latest() == 40


@pytest.mark.parametrize("line", ["", "garbage", "90", "90,abc", "1,2,3"])
def test_malformed_lines_change_nothing(pipe, line):
    pipe.feed_line("10,50")
    before = list(pipe.slots.smoothed)
    assert pipe.feed_line(line) is False
    assert pipe.slots.smoothed == before
    assert pipe.last_angle == 10
    assert len(pipe.pings) == 1


def test_info_lines_are_only_logged(pipe, caplog):
    with caplog.at_level("INFO", logger="sonar.pipeline"):
        assert pipe.feed_line("SPD_ACK,15") is False
    assert "SPD_ACK,15" in caplog.text
    assert pipe.last_angle is None
    assert pipe.slots.smoothed == [None] * 181


def test_no_echo_clears_slot_without_history(pipe):
    pipe.feed_line("30,80")
    pipe.feed_line("30,-1")
    assert pipe.slots.smoothed[30] is None
    assert len(pipe.pings) == 1
    assert len(pipe.trail) == 1
    assert pipe.plot.ordered()[-1] == 80


def test_far_echo_is_smoothed_and_plotted_but_not_pinged(pipe):
    pipe.cfg.max_range = 100
    pipe.feed_line("45,150")
    assert pipe.slots.smoothed[45] == 150
    assert pipe.plot.latest() == 150
    assert len(pipe.pings) == 0
    assert len(pipe.trail) == 0


def test_calibration_applies_to_incoming_angles(pipe):
    pipe.cfg.angle_offset = 10
    pipe.cfg.mirror = True
    assert pipe.ingest(20, 50) == 150
    assert pipe.slots.smoothed[150] == 50


def test_tick_eases_display_and_arm(pipe):
    pipe.cfg.arm_easing = 0.5
    pipe.feed_line("170,60")
    pipe.tick()
    assert pipe.slots.displayed[170] == 60
    assert pipe.arm_angle == pytest.approx(130.0)
    assert next(iter(pipe.pings)).life < PING_LIFE


def test_sweep_snapshot_only_when_onion_enabled(pipe):
    for a in (170, 175, 178, 3):
        pipe.ingest(a, 50); pipe.tick()
    assert pipe.sweeps == 1
    assert len(pipe.onion) == 0

    pipe.cfg.onion_enabled = True
    for a in (170, 175, 178, 3):
        pipe.ingest(a, 50); pipe.tick()
    assert pipe.sweeps == 2
    assert len(pipe.onion) == 1
    assert pipe.onion.layers[0][175] == 50


def test_enabling_onion_on_empty_store_forces_snapshot(pipe):
    pipe.ingest(60, 30); pipe.tick()
    pipe.set_onion(True)
    assert len(pipe.onion) == 1
    pipe.set_onion(False)
    pipe.set_onion(True)
    assert len(pipe.onion) == 1      # already had a layer
    pipe.set_onion(False)
    assert len(pipe.onion) == 1      # disabling keeps layers


def test_snapshot_masks_outside_sector(pipe):
    for a in range(0, 181, 10):
        pipe.ingest(a, 40)
    pipe.tick()
    pipe.cfg.full_circle = False
    pipe.cfg.sector_min, pipe.cfg.sector_max = 30, 60
    pipe.snapshot()
    layer = pipe.onion.layers[0]
    assert [a for a, v in enumerate(layer) if v is not None] == [30, 40, 50, 60]


def test_onion_depth_follows_settings(pipe):
    pipe.cfg.onion_depth = 2
    for a in range(4):
        pipe.ingest(a * 10, 20); pipe.tick()
        pipe.snapshot()
    assert len(pipe.onion) == 2


def test_sector_edges_from_current_angle(pipe):
    pipe.ingest(40, 20)
    pipe.set_sector_min()
    pipe.ingest(130, 20)
    pipe.set_sector_max()
    assert (pipe.cfg.sector_min, pipe.cfg.sector_max) == (40, 130)
    pipe.ingest(150, 20)
    pipe.set_sector_min()            # cannot cross the max edge
    assert pipe.cfg.sector_min == 130


def test_reset_data_keeps_config(pipe):
    pipe.cfg.max_range = 321
    pipe.set_onion(True)
    pipe.feed_line("90,40"); pipe.tick(); pipe.snapshot()
    pipe.reset_data()
    assert pipe.slots.smoothed == [None] * 181
    assert pipe.slots.displayed == [None] * 181
    assert len(pipe.onion) == 0 and len(pipe.pings) == 0 and len(pipe.trail) == 0
    assert pipe.plot.ordered() == [None] * pipe.plot.capacity
    assert pipe.last_angle is None
    assert pipe.cfg.max_range == 321
    assert pipe.cfg.onion_enabled is True


def test_reset_all_restores_defaults(pipe):
    pipe.cfg.serial_port = "/dev/ttyACM3"
    pipe.cfg.angle_offset = 12
    pipe.cfg.onion_depth = 2
    pipe.feed_line("90,40")
    pipe.reset_all()
    assert pipe.cfg.angle_offset == 0
    assert pipe.cfg.onion_depth == Settings().onion_depth
    assert pipe.cfg.serial_port == "/dev/ttyACM3"
    assert pipe.slots.smoothed == [None] * 181


def test_round_trip_sweep_captures_one_layer(pipe):
    for a in range(0, 181):
        pipe.feed_line(f"{a},{50 + a % 7}")
        pipe.tick()

    pipe.set_onion(True)             # store empty at the turn-around
    for a in range(180, -1, -1):
        pipe.feed_line(f"{a},60")
        pipe.tick()

    assert len(pipe.onion) == 1
    layer = pipe.onion.layers[0]
    assert all(layer[a] is not None for a in range(181))
    assert layer[3] == 53


def test_onion_store_follows_configured_depth_ceiling():
    pipe = SonarPipeline(Settings(onion_depth=25))
    for _ in range(30):
        pipe.snapshot()
    assert pipe.onion.depth == pipe.cfg.onion_depth
    assert len(pipe.onion) == pipe.cfg.onion_depth


def test_pings_reach_the_far_edge_of_the_widest_range(pipe):
    pipe.cfg.max_range = MAX_RANGE_CM
    pipe.ingest(90, MAX_RANGE_CM * PING_RANGE_SLACK)
    assert len(pipe.pings) == 1
