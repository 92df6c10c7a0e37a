import asyncio

from knocklock.workers.retention_worker import RetentionWorker


class CountingPruner:
    def __init__(self, fail=False):
        self.runs = 0
        self.fail = fail

    async def prune_old_logs(self):
        self.runs += 1
        if self.fail:
            raise RuntimeError("store unreachable")
        return 0


def test_worker_sweeps_repeatedly():
    pruner = CountingPruner()
    worker = RetentionWorker(pruner, interval=0.01, initial_delay=0)

    async def scenario():
        worker.start()
        await asyncio.sleep(0.1)
        await worker.stop()

    asyncio.run(scenario())
    assert pruner.runs >= 2
    assert worker.running is False


def test_worker_survives_failed_sweep():
    pruner = CountingPruner(fail=True)
    worker = RetentionWorker(pruner, interval=0.01, initial_delay=0)

    async def scenario():
        worker.start()
        await asyncio.sleep(0.1)
        await worker.stop()

    asyncio.run(scenario())
    assert pruner.runs >= 2


def test_worker_disabled_with_zero_interval():
    pruner = CountingPruner()
    worker = RetentionWorker(pruner, interval=0, initial_delay=0)

    async def scenario():
        worker.start()
        await asyncio.sleep(0.02)
        await worker.stop()

    asyncio.run(scenario())
    assert pruner.runs == 0
    assert worker.running is False


def test_start_twice_runs_one_loop():
    pruner = CountingPruner()
    worker = RetentionWorker(pruner, interval=10, initial_delay=0)

    async def scenario():
        worker.start()
        first = worker._task
        worker.start()
        assert worker._task is first
        await asyncio.sleep(0.02)
        await worker.stop()

    asyncio.run(scenario())
    assert pruner.runs == 1
