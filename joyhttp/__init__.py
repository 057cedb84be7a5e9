"""Joystick direction reporting over HTTP(S), with a small callback-driven GET client."""

__version__ = "0.1.0"
__all__ = ["httpclient", "joystick", "verify"]