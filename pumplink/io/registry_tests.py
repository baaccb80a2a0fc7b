import threading
import unittest

from pumplink.io.registry import PortRegistry


class PortRegistryTests(unittest.TestCase):
  def setUp(self):
    self.registry = PortRegistry()

  def test_claim_and_release(self):
    owner = object()
    self.assertTrue(self.registry.claim("COM8", owner))
    self.assertTrue(self.registry.is_claimed("COM8"))
    self.assertEqual(self.registry.claimed_ports, ["COM8"])
    self.registry.release("COM8", owner)
    self.assertFalse(self.registry.is_claimed("COM8"))

  def test_second_owner_is_refused(self):
    first, second = object(), object()
    self.assertTrue(self.registry.claim("COM8", first))
    self.assertFalse(self.registry.claim("COM8", second))
    self.assertTrue(self.registry.claim("COM8", first))

    # only the owner can release
    self.registry.release("COM8", second)
    self.assertTrue(self.registry.is_claimed("COM8"))

  def test_release_unclaimed_is_noop(self):
    self.registry.release("COM9", object())
    self.assertFalse(self.registry.is_claimed("COM9"))

  def test_concurrent_claims_have_one_winner(self):
    results = []
    barrier = threading.Barrier(8)

    def claim():
      barrier.wait()
      results.append(self.registry.claim("COM8", object()))

    threads = [threading.Thread(target=claim) for _ in range(8)]
    for t in threads:
      t.start()
    for t in threads:
      t.join()
    self.assertEqual(results.count(True), 1)


if __name__ == "__main__":
  unittest.main()
