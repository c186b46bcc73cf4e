"""Thread pool management utility"""
import threading
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from typing import Callable, Optional, Any, Dict, List
from foodledger.config import config

REPORT_FETCH_POOL = "report_fetch"


class FetchTimeout(Exception):
    """Futures did not complete within the allotted time"""


class ThreadPoolManager:
    """Thread pool manager with thread-safe control"""

    def __init__(self):
        self._pools: Dict[str, ThreadPoolExecutor] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def get_pool(
        self,
        pool_name: str,
        max_workers: Optional[int] = None
    ) -> ThreadPoolExecutor:
        """
        Get or create a thread pool

        Args:
            pool_name: Name of the pool (e.g., 'report_fetch')
            max_workers: Maximum number of worker threads

        Returns:
            ThreadPoolExecutor instance
        """
        if pool_name not in self._pools:
            if max_workers is None:
                max_workers = self._get_default_workers(pool_name)

            with self._get_lock(pool_name):
                if pool_name not in self._pools:
                    self._pools[pool_name] = ThreadPoolExecutor(
                        max_workers=max_workers,
                        thread_name_prefix=pool_name,
                    )

        return self._pools[pool_name]

    def _get_default_workers(self, pool_name: str) -> int:
        """Get default worker count for pool name"""
        defaults = {
            REPORT_FETCH_POOL: config.REPORT_FETCH_THREADS,
        }
        return defaults.get(pool_name, config.REPORT_FETCH_THREADS)

    def _get_lock(self, pool_name: str) -> threading.Lock:
        """Get lock for pool name"""
        with self._registry_lock:
            if pool_name not in self._locks:
                self._locks[pool_name] = threading.Lock()
            return self._locks[pool_name]

    def submit(
        self,
        pool_name: str,
        fn: Callable,
        *args,
        **kwargs
    ) -> Future:
        """
        Submit a task to thread pool

        Args:
            pool_name: Name of the pool
            fn: Function to execute
            *args: Function arguments
            **kwargs: Function keyword arguments

        Returns:
            Future object
        """
        pool = self.get_pool(pool_name)
        return pool.submit(fn, *args, **kwargs)

    def wait_for_completion(
        self,
        futures: List[Future],
        timeout: Optional[float] = None
    ) -> List[Any]:
        """
        Join barrier: wait for every future and return results in submission order

        The first exception cancels the futures that have not started and is
        re-raised. If the timeout expires, pending futures are cancelled and
        FetchTimeout is raised.

        Args:
            futures: Futures to wait for
            timeout: Maximum time to wait (None waits indefinitely)

        Returns:
            List of results, same order as futures
        """
        done, not_done = wait_futures(futures, timeout=timeout, return_when=FIRST_EXCEPTION)

        failed = [f for f in futures if f in done and not f.cancelled() and f.exception() is not None]
        if failed or not_done:
            for future in not_done:
                future.cancel()
        if failed:
            raise failed[0].exception()
        if not_done:
            raise FetchTimeout(f"{len(not_done)} of {len(futures)} tasks did not finish in {timeout}s")

        return [future.result() for future in futures]

    def shutdown(self, pool_name: Optional[str] = None, wait: bool = True):
        """
        Shutdown thread pool(s)

        Args:
            pool_name: Name of pool to shutdown (None for all)
            wait: Whether to wait for tasks to complete
        """
        if pool_name:
            pools_to_shutdown = [pool_name]
        else:
            pools_to_shutdown = list(self._pools.keys())

        for name in pools_to_shutdown:
            if name in self._pools:
                with self._get_lock(name):
                    self._pools[name].shutdown(wait=wait)
                    del self._pools[name]

    def shutdown_all(self, wait: bool = True):
        """Shutdown all thread pools"""
        self.shutdown(wait=wait)


# Global thread pool manager instance
thread_pool_manager = ThreadPoolManager()
