
import asyncio
import unittest

from pumpwatch.scheduler import PollScheduler


class TestPollScheduler(unittest.IsolatedAsyncioTestCase):

    async def test_runs_max_cycles(self):
        scheduler = PollScheduler({'poll_interval': 0.01})
        calls = []

        async def cycle():
            calls.append(1)

        await scheduler.run(cycle, max_cycles=3)

        self.assertEqual(len(calls), 3)
        self.assertEqual(scheduler.state.cycles_completed, 3)
        self.assertFalse(scheduler.state.running)

    async def test_stop_inside_cycle_finishes_that_cycle(self):
        scheduler = PollScheduler({'poll_interval': 0.01})
        calls = []

        async def cycle():
            calls.append(1)
            if len(calls) == 2:
                scheduler.request_stop()

        await scheduler.run(cycle)
        self.assertEqual(len(calls), 2)

    async def test_stop_interrupts_sleep(self):
        scheduler = PollScheduler({'poll_interval': 60})

        async def cycle():
            asyncio.get_running_loop().call_later(0.05, scheduler.request_stop)

        await asyncio.wait_for(scheduler.run(cycle), timeout=5)
        self.assertEqual(scheduler.state.cycles_completed, 1)

    async def test_cycle_errors_do_not_stop_loop(self):
        scheduler = PollScheduler({'poll_interval': 0.01})

        async def cycle():
            raise RuntimeError("upstream down")

        with self.assertLogs('pumpwatch.scheduler', level='ERROR'):
            await scheduler.run(cycle, max_cycles=2)

        stats = scheduler.get_stats()
        self.assertEqual(stats['cycles_completed'], 2)
        self.assertEqual(stats['cycles_failed'], 2)

    async def test_stop_before_run(self):
        scheduler = PollScheduler({'poll_interval': 0.01})
        calls = []

        async def cycle():
            calls.append(1)

        scheduler.request_stop()
        await scheduler.run(cycle)
        self.assertEqual(calls, [])

    async def test_overrun_starts_next_cycle_immediately(self):
        scheduler = PollScheduler({'poll_interval': 0.01})

        async def cycle():
            await asyncio.sleep(0.03)

        with self.assertLogs('pumpwatch.scheduler', level='WARNING') as logs:
            await scheduler.run(cycle, max_cycles=2)

        self.assertTrue(any('starting next immediately' in line for line in logs.output))

    def test_invalid_interval(self):
        with self.assertRaises(ValueError):
            PollScheduler({'poll_interval': 0})


if __name__ == '__main__':
    unittest.main()
