import pytest

from ringwatch.core.errors import PeerUnreachable
from ringwatch.core.models.cluster import PeerResult
from ringwatch.core.models.health import MismatchKind
from ringwatch.core.service.health import ConsistencyChecker
from tests.utils import make_snapshot


NODES = ["a:0", "b:0", "c:0"]


def peer(server, snapshot=None, error=None):
    address = f"{server}:4242"
    if error is not None:
        error = PeerUnreachable(address, error)
    return PeerResult(server=server, address=address, snapshot=snapshot, error=error)


@pytest.fixture
def checker():
    return ConsistencyChecker()


@pytest.mark.ut
def test_identical_views_are_healthy(checker):
    reference = make_snapshot(NODES)
    peers = [peer("b", make_snapshot(NODES)), peer("c", make_snapshot(NODES))]

    report = checker.check(reference, peers, expected_peers=2)

    assert report.healthy
    assert report.inconsistencies == ()
    assert checker.is_healthy(reference, peers, expected_peers=2) is True


@pytest.mark.ut
def test_no_peers_is_healthy(checker):
    assert checker.is_healthy(make_snapshot(["a:0"]), [], expected_peers=0)


@pytest.mark.ut
def test_peer_count_mismatch(checker):
    reference = make_snapshot(NODES)

    report = checker.check(reference, [peer("b", make_snapshot(NODES))], expected_peers=2)

    assert not report.healthy
    assert report.inconsistencies[0].kind == MismatchKind.peer_count


@pytest.mark.ut
def test_absent_snapshot_is_unhealthy_and_named(checker):
    reference = make_snapshot(NODES)
    peers = [peer("b", make_snapshot(NODES)), peer("c", error="connection refused")]

    report = checker.check(reference, peers, expected_peers=2)

    assert not report.healthy
    [finding] = report.inconsistencies
    assert finding.peer == "c:4242"
    assert finding.kind == MismatchKind.unreachable
    assert "connection refused" in finding.detail


@pytest.mark.ut
def test_absent_snapshot_without_error(checker):
    report = checker.check(make_snapshot(NODES), [peer("b")], expected_peers=1)

    assert report.inconsistencies[0].kind == MismatchKind.unreachable
    assert "unknown error" in report.inconsistencies[0].detail


@pytest.mark.ut
def test_algorithm_mismatch(checker):
    reference = make_snapshot(NODES)
    peers = [peer("b", make_snapshot(NODES, algorithm="jump_fnv1a"))]

    report = checker.check(reference, peers, expected_peers=1)

    assert report.inconsistencies[0].kind == MismatchKind.algorithm
    assert report.inconsistencies[0].peer == "b:4242"


@pytest.mark.ut
def test_node_count_mismatch(checker):
    reference = make_snapshot(NODES)
    peers = [peer("b", make_snapshot(NODES[:2]))]

    report = checker.check(reference, peers, expected_peers=1)

    assert report.inconsistencies[0].kind == MismatchKind.node_count


@pytest.mark.ut
def test_same_members_in_different_order_is_unhealthy(checker):
    reference = make_snapshot(["a:0", "b:0"])
    peers = [peer("b", make_snapshot(["b:0", "a:0"]))]

    report = checker.check(reference, peers, expected_peers=1)

    [finding] = report.inconsistencies
    assert finding.kind == MismatchKind.node_order
    assert "#0" in finding.detail


@pytest.mark.ut
def test_instance_difference_is_an_order_mismatch(checker):
    reference = make_snapshot(["a:0", "b:0"])
    peers = [peer("b", make_snapshot(["a:0", "b:1"]))]

    report = checker.check(reference, peers, expected_peers=1)

    assert report.inconsistencies[0].kind == MismatchKind.node_order
    assert "#1" in report.inconsistencies[0].detail


@pytest.mark.ut
def test_replicas_are_not_compared(checker):
    reference = make_snapshot(NODES, algorithm="jump_fnv1a", replicas=2)
    peers = [peer("b", make_snapshot(NODES, algorithm="jump_fnv1a", replicas=3))]

    assert checker.is_healthy(reference, peers, expected_peers=1)


@pytest.mark.ut
def test_first_failing_peer_in_probe_order_is_reported(checker):
    reference = make_snapshot(NODES)
    peers = [
        peer("b", make_snapshot(NODES, algorithm="jump_fnv1a")),
        peer("c", error="timed out"),
    ]

    report = checker.check(reference, peers, expected_peers=2)

    assert [i.peer for i in report.inconsistencies] == ["b:4242"]


@pytest.mark.ut
def test_report_to_dict():
    checker = ConsistencyChecker()
    report = checker.check(make_snapshot(NODES), [peer("b")], expected_peers=1)

    data = report.to_dict()
    assert data["healthy"] is False
    assert data["inconsistencies"][0]["peer"] == "b:4242"
    assert data["inconsistencies"][0]["kind"] == "unreachable"


@pytest.mark.ut
def test_mismatch_names_a_daemon_that_calls_itself_otherwise(checker):
    reference = make_snapshot(["a:0", "b:0"])
    peers = [peer("b", make_snapshot(["b:0", "a:0"], name="b-old"))]

    report = checker.check(reference, peers, expected_peers=1)

    assert "daemon calls itself 'b-old'" in report.inconsistencies[0].detail


@pytest.mark.ut
def test_mismatch_detail_skips_a_name_matching_the_server(checker):
    reference = make_snapshot(NODES)
    peers = [peer("b", make_snapshot(NODES, algorithm="jump_fnv1a", name="b"))]

    report = checker.check(reference, peers, expected_peers=1)

    assert "calls itself" not in report.inconsistencies[0].detail
