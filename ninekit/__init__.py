"""9P protocol and client, plumber messages, a PDP-1 emulator and draw helpers."""

__version__ = "0.1.0"
__all__ = ["wire", "dir", "fcall", "client", "dial", "plumb", "pdp1", "draw"]