from pumplink.pumps.backend import SyringePumpBackend


class SyringePumpChatterboxBackend(SyringePumpBackend):
  """ Chatter box backend for device-free testing. Prints out all commands. """

  async def open_connection(self):
    print("Setting up the pump.")

  async def close_connection(self):
    print("Stopping the pump.")

  async def exchange(self, command: str) -> str:
    print(f"Sending {command}")
    return ""
