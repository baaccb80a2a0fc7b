import unittest

from pumplink.machines.errors import NotConnected
from pumplink.machines.machine import Machine, MachineBackend, need_setup_finished


class MockBackend(MachineBackend):
  def __init__(self, mock_param):
    self.mock_param = mock_param
    self.calls = []

  async def setup(self):
    self.calls.append("setup")

  async def stop(self):
    self.calls.append("stop")

  def serialize(self):
    return {**super().serialize(), "mock_param": self.mock_param}


class MockMachine(Machine):
  @need_setup_finished
  async def ping(self):
    return "pong"


class TestMachine(unittest.IsolatedAsyncioTestCase):
  def test_serialize(self):
    m = MockMachine(backend=MockBackend("mock_param"))
    self.assertEqual(
      m.serialize(),
      {
        "backend": {
          "mock_param": "mock_param",
          "type": "MockBackend",
        },
      },
    )

  def test_deserialize(self):
    m = MockMachine(backend=MockBackend("mock_param"))
    copy = MockMachine.deserialize(m.serialize())
    self.assertIsInstance(copy.backend, MockBackend)
    self.assertEqual(copy.backend.mock_param, "mock_param")

  def test_deserialize_unknown_backend(self):
    with self.assertRaises(ValueError):
      MachineBackend.deserialize({"type": "NoSuchBackend"})

  async def test_need_setup_finished(self):
    m = MockMachine(backend=MockBackend("mock_param"))
    with self.assertRaises(NotConnected):
      await m.ping()
    async with m:
      self.assertEqual(await m.ping(), "pong")
    with self.assertRaises(NotConnected):
      await m.ping()
    self.assertEqual(m.backend.calls, ["setup", "stop"])
