import asyncio
import inspect
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from logzero import logger


class CallTimeout(Exception):
    """Raised by run when the callable exceeds its timeout."""


def run(callable, timeout, *args, **kwargs):
    """
    Run a (sync or async) callable and give up after timeout seconds.

    Async functions are run on a fresh asyncio event loop bounded by
    asyncio.wait_for. Plain functions are run on a worker thread that is
    abandoned (not joined) when the timeout expires.

    :param callable: A function or async function pointer
    :type callable: Callable
    :param timeout: Number of seconds the callable is allowed to execute
        before timing out. None means no limit.
    :type timeout: Union[int,float,None]
    :param *args: Expanded list of arguments to pass to the callable
    :type *args: Any
    :param **kwargs: Expanded keyword arguments to pass to the callable
    :type **kwargs: Any
    :return: Any
    """
    if inspect.iscoroutinefunction(callable):
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(
                asyncio.wait_for(callable(*args, **kwargs), timeout=timeout))
        except asyncio.TimeoutError:
            logger.error("Call to %s timed out!!!", callable)
            raise CallTimeout("Call to {} exceeded {}s".format(callable,
                                                              timeout))
        finally:
            loop.close()

    if timeout is None:
        return callable(*args, **kwargs)

    executor = ThreadPoolExecutor(max_workers=1)
    try:
        future = executor.submit(callable, *args, **kwargs)
        return future.result(timeout=timeout)
    except FutureTimeoutError:
        logger.error("Call to %s timed out!!!", callable)
        raise CallTimeout("Call to {} exceeded {}s".format(callable, timeout))
    finally:
        executor.shutdown(wait=False)


class Deadline(object):
    """
    One time budget shared by every provider call made on behalf of a single
    request (a derive, a decode or a cache lookup).

    :param timeout: Seconds the whole request may take. None means no limit.
    :type timeout: Union[int,float,None]
    """

    def __init__(self, timeout):
        self.timeout = timeout
        self.expires = None if timeout is None else time.monotonic() + timeout

    @property
    def bounded(self) -> bool:
        return self.expires is not None

    def remaining(self):
        """
        Seconds left, never negative. None when there is no limit.

        :return: Union[float,None]
        """
        if self.expires is None:
            return None
        return max(0, self.expires - time.monotonic())

    def expired(self) -> bool:
        return self.bounded and self.remaining() == 0

    def __repr__(self):
        return "Deadline(remaining={})".format(self.remaining())


def as_deadline(timeout) -> Deadline:
    """
    Start a Deadline from a number of seconds. A Deadline is returned as is.
    """
    if isinstance(timeout, Deadline):
        return timeout
    return Deadline(timeout)
