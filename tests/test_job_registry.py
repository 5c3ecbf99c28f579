from __future__ import annotations

from contracts import Plugin
from orchestrator.jobs import Job, JobRegistry


class Idle(Plugin):
    def run(self) -> None:
        pass


class FakeHandle:
    def __init__(self, polls_alive: int) -> None:
        self.polls_alive = polls_alive

    def is_alive(self) -> bool:
        if self.polls_alive <= 0:
            return False
        self.polls_alive -= 1
        return True

    def join(self, timeout=None) -> None:
        self.polls_alive = 0


class StuckHandle:
    def is_alive(self) -> bool:
        return True

    def join(self, timeout=None) -> None:
        return None


def _job(name: str, handle) -> Job:
    job = Job(name=name, handle=handle)
    job.plugin = Idle(name, stop=job.stop)
    return job


def test_names_and_get_follow_launch_order():
    registry = JobRegistry()
    registry.add(_job("b", StuckHandle()))
    registry.add(_job("a", StuckHandle()))
    assert registry.names() == ["b", "a"]
    assert registry.get("a").name == "a"
    assert registry.get("missing") is None


def test_busy_reflects_liveness():
    registry = JobRegistry()
    assert registry.busy() is False
    registry.add(_job("done", FakeHandle(0)))
    assert registry.busy() is False
    registry.add(_job("stuck", StuckHandle()))
    assert registry.busy() is True


def test_kill_removes_job_and_cancels_plugin():
    registry = JobRegistry()
    job = _job("x", StuckHandle())
    registry.add(job)
    assert registry.kill("x") is True
    assert registry.names() == []
    assert job.killed is True
    assert job.plugin.cancelled is True
    assert job.plugin.wait(5) is True
    assert registry.kill("x") is False


def test_job_without_handle_is_not_alive():
    job = Job(name="pending")
    assert job.alive() is False
    assert job.plugin is None
    assert job.killed is False
    job.kill()
    assert job.killed is True


def test_kill_unknown_returns_false():
    assert JobRegistry().kill("ghost") is False


def test_block_polls_until_every_job_ends(sink):
    registry = JobRegistry()
    registry.add(_job("quick", FakeHandle(1)))
    registry.add(_job("slow", FakeHandle(4)))
    sleeps = []

    registry.block(0.5, sink, sleep=sleeps.append)

    assert registry.names() == []
    assert registry.busy() is False
    assert sleeps and all(interval == 0.5 for interval in sleeps)
    assert "Waiting on the following (2) plugins to finish:" in sink.text("debug")
    assert "quick, slow" in sink.text("debug")


def test_block_returns_immediately_when_empty(sink):
    sleeps = []
    JobRegistry().block(1.0, sink, sleep=sleeps.append)
    assert sleeps == []
    assert sink.messages == []


def test_prune_returns_finished_jobs():
    registry = JobRegistry()
    registry.add(_job("done", FakeHandle(0)))
    registry.add(_job("stuck", StuckHandle()))
    finished = registry.prune()
    assert [job.name for job in finished] == ["done"]
    assert registry.names() == ["stuck"]
