import pytest

from app.core.errors import AppError, ErrorKind
from app.db.store import MemoryTable, VersionConflict
from app.models.progress import ProgressRecord
from app.services.progress_service import ProgressService


@pytest.fixture
def progress(tables):
    return ProgressService(tables.progress)


def test_default_progress_is_not_persisted(progress, tables):
    record = progress.get_progress("u1")
    assert record.solved_problems == []
    assert record.total_solved == 0
    assert set(record.progress_by_level) == {"basic", "medium", "advanced"}
    assert tables.progress.get("u1") is None


def test_mark_solved_is_idempotent(progress):
    first = progress.mark_solved("u1", "p1", "basic")
    second = progress.mark_solved("u1", "p1", "basic")

    assert second.total_solved == 1
    assert second.solved_problems == ["p1"]
    assert second.solved_in("basic") == ["p1"]
    assert second.to_json() == first.to_json()


def test_mark_solved_skips_write_when_already_solved(progress, tables):
    progress.mark_solved("u1", "p1", "basic")
    version = tables.progress.get("u1")["version"]
    progress.mark_solved("u1", "p1", "basic")
    assert tables.progress.get("u1")["version"] == version


def test_solve_then_unsolve_restores_count(progress):
    progress.mark_solved("u1", "p1", "basic")
    before = progress.get_progress("u1").total_solved

    progress.mark_solved("u1", "p2", "medium")
    after = progress.mark_unsolved("u1", "p2", "medium")

    assert after.total_solved == before
    assert "p2" not in after.solved_problems
    assert after.solved_in("medium") == []


def test_unsolve_with_different_level_keeps_subset_invariant(progress):
    progress.mark_solved("u1", "p1", "basic")
    record = progress.mark_unsolved("u1", "p1", "advanced")
    assert record.solved_problems == []
    assert record.solved_in("basic") == []


def test_unsolve_unknown_problem_is_noop(progress, tables):
    record = progress.mark_unsolved("u1", "p9", "basic")
    assert record.total_solved == 0
    assert tables.progress.get("u1") is None


def test_invariants_hold(progress):
    for i, level in enumerate(["basic", "medium", "advanced", "basic"]):
        progress.mark_solved("u1", f"p{i}", level)
    progress.mark_unsolved("u1", "p1", "medium")

    record = progress.get_progress("u1")
    assert record.total_solved == len(record.solved_problems) == 3
    for level in ("basic", "medium", "advanced"):
        assert set(record.solved_in(level)) <= set(record.solved_problems)


def test_stats(progress):
    progress.mark_solved("u1", "p1", "basic")
    progress.mark_solved("u1", "p2", "basic")
    progress.mark_solved("u1", "p3", "advanced")

    stats = progress.get_stats("u1")
    assert (stats.total_solved, stats.basic_solved, stats.medium_solved, stats.advanced_solved) == (3, 2, 0, 1)


def test_leaderboard_order_ties_and_limit(progress):
    solved = {"carol": 1, "alice": 3, "bob": 3, "dave": 0, "erin": 2}
    for user, count in solved.items():
        for i in range(count):
            progress.mark_solved(user, f"p{i}", "basic")

    board = progress.get_leaderboard(3)
    assert [e.user_id for e in board] == ["alice", "bob", "erin"]
    assert [e.total_solved for e in board] == [3, 3, 2]

    # dave never solved anything, so has no record
    assert len(progress.get_leaderboard(10)) == 4


def test_leaderboard_limit_above_hundred_returns_every_record(progress, tables):
    for i in range(120):
        record = ProgressRecord(user_id=f"user{i:03d}", solved_problems=[f"p{i}"], total_solved=1)
        tables.progress.put(record.to_item())

    assert len(progress.get_leaderboard(150)) == 120
    assert len(progress.get_leaderboard(110)) == 110


class FlakyTable(MemoryTable):
    """Fails the first ``conflicts`` versioned writes."""

    def __init__(self, conflicts):
        super().__init__("progress", "userId")
        self.conflicts = conflicts

    def put(self, item, *, if_absent=False, expected_version=None):
        if expected_version is not None and self.conflicts > 0:
            self.conflicts -= 1
            raise VersionConflict("changed")
        super().put(item, if_absent=if_absent, expected_version=expected_version)


def test_concurrent_change_is_retried():
    service = ProgressService(FlakyTable(conflicts=2))
    record = service.mark_solved("u1", "p1", "basic")
    assert record.solved_problems == ["p1"]
    assert service.get_progress("u1").version == 1


def test_persistent_conflict_surfaces_as_conflict():
    service = ProgressService(FlakyTable(conflicts=10))
    with pytest.raises(AppError) as exc:
        service.mark_solved("u1", "p1", "basic")
    assert exc.value.kind == ErrorKind.CONFLICT


def test_stale_writer_loses_to_version_check(tables):
    a = ProgressService(tables.progress)
    stale = a.get_progress("u1")
    a.mark_solved("u1", "p1", "basic")

    stale.solved_problems.append("p2")
    with pytest.raises(VersionConflict):
        tables.progress.put(stale.to_item(), expected_version=stale.version)


# HTTP layer

def test_progress_routes_require_token(client):
    assert client.get("/api/progress").status_code == 401
    assert client.post("/api/progress/solve", json={"problemId": "p1", "level": "basic"}).status_code == 401


def test_solve_and_unsolve_routes(client, user_headers):
    resp = client.post("/api/progress/solve", json={"problemId": "p1", "level": "basic"}, headers=user_headers)
    assert resp.status_code == 200
    body = resp.json()["progress"]
    assert body["solvedProblems"] == ["p1"]
    assert body["totalSolved"] == 1
    assert body["progressByLevel"]["basic"]["solved"] == ["p1"]
    assert "version" not in body

    stats = client.get("/api/progress/stats", headers=user_headers).json()["stats"]
    assert stats["basicSolved"] == 1

    resp = client.post("/api/progress/unsolve", json={"problemId": "p1", "level": "basic"}, headers=user_headers)
    assert resp.json()["progress"]["totalSolved"] == 0


def test_solve_validation(client, user_headers):
    missing = client.post("/api/progress/solve", json={"problemId": "p1"}, headers=user_headers)
    assert missing.status_code == 400
    assert missing.json()["message"] == "problemId and level are required"

    bad_level = client.post("/api/progress/solve", json={"problemId": "p1", "level": "x"}, headers=user_headers)
    assert bad_level.status_code == 400


def test_leaderboard_route(client, admin_headers, user_headers):
    client.post("/api/progress/solve", json={"problemId": "p1", "level": "basic"}, headers=user_headers)
    client.post("/api/progress/solve", json={"problemId": "p2", "level": "basic"}, headers=user_headers)
    client.post("/api/progress/solve", json={"problemId": "p1", "level": "basic"}, headers=admin_headers)

    board = client.get("/api/progress/leaderboard?limit=1", headers=user_headers).json()["leaderboard"]
    assert len(board) == 1
    assert board[0]["totalSolved"] == 2

    fallback = client.get("/api/progress/leaderboard?limit=abc", headers=user_headers)
    assert len(fallback.json()["leaderboard"]) == 2


def test_leaderboard_route_accepts_large_limit(client, user_headers, tables):
    for i in range(105):
        tables.progress.put(ProgressRecord(user_id=f"user{i:03d}").to_item())

    board = client.get("/api/progress/leaderboard?limit=200", headers=user_headers).json()["leaderboard"]
    assert len(board) == 105
