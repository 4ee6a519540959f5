"""Default settings for talking to a netdump server.

Library callers pass these explicitly; the CLI exposes each of them as an
option that can also be read from a ``NETDUMP_*`` environment variable.
"""

# Port the netdump homebrew listens on
DEFAULT_PORT = 9875

# Protocol version spoken by default (see protocol.commands.REVISIONS)
DEFAULT_PROTOCOL_VERSION = 1

# Size of the receive buffer used when streaming game images
IO_SIZE = 32768

# Socket timeout in seconds. None blocks forever, like the original client.
DEFAULT_TIMEOUT = None

# Default output locations
DEFAULT_GAME_PATH = "./game.iso"
DEFAULT_BCA_PATH = "./game.bca"
DEFAULT_FULL_DIRECTORY = "."
