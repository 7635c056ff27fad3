import asyncio

from gengc._cogs.aiokits.aiotasks import stop, wait


async def simple() -> None:
    await asyncio.Event().wait()


async def test_waiting_for_no_tasks():
    done, pending = await wait([])
    assert not done
    assert not pending


async def test_stop_with_no_tasks(assert_logs, logger):
    done, pending = await stop([], title='sample', logger=logger)
    assert not done
    assert not pending
    assert_logs(["Sample tasks stopping is skipped: no tasks given."])


async def test_stop_with_no_tasks_when_quiet(assert_logs, logger, caplog):
    done, pending = await stop([], title='sample', logger=logger, quiet=True)
    assert not done
    assert not pending
    assert not caplog.messages


async def test_stop_cancels_the_tasks(assert_logs, logger):
    task1 = asyncio.create_task(simple())
    task2 = asyncio.create_task(simple())
    done, pending = await stop([task1, task2], title='sample', logger=logger)
    assert done == {task1, task2}
    assert not pending
    assert task1.cancelled()
    assert task2.cancelled()
    assert_logs(["Sample tasks are stopped"])
