"""Rendezvous relay pairing two WebRTC peers through short numeric room codes."""

__version__ = "0.1.0"
