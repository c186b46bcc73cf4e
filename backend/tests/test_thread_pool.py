"""Unit tests for the thread pool manager"""
import threading
import time
import unittest
from foodledger.utils.thread_pool import FetchTimeout, ThreadPoolManager


class TestThreadPoolManager(unittest.TestCase):
    """Test cases for ThreadPoolManager"""

    def setUp(self):
        self.manager = ThreadPoolManager()

    def tearDown(self):
        self.manager.shutdown_all(wait=True)

    def test_results_in_submission_order(self):
        """Results come back in the order the futures were submitted"""
        def delayed(value, delay):
            time.sleep(delay)
            return value

        futures = [
            self.manager.submit("test", delayed, "slow", 0.05),
            self.manager.submit("test", delayed, "fast", 0),
        ]
        self.assertEqual(self.manager.wait_for_completion(futures), ["slow", "fast"])

    def test_first_exception_raised(self):
        """A failing task fails the barrier with its own exception"""
        def fail():
            raise KeyError("boom")

        futures = [self.manager.submit("test", fail), self.manager.submit("test", lambda: 1)]
        with self.assertRaises(KeyError):
            self.manager.wait_for_completion(futures)

    def test_timeout(self):
        """Unfinished tasks raise FetchTimeout"""
        release = threading.Event()
        futures = [self.manager.submit("test", release.wait, 5)]
        try:
            with self.assertRaises(FetchTimeout):
                self.manager.wait_for_completion(futures, timeout=0.05)
        finally:
            release.set()

    def test_pool_reused(self):
        """The same name gives the same pool"""
        self.assertIs(self.manager.get_pool("test"), self.manager.get_pool("test"))


if __name__ == "__main__":
    unittest.main()
