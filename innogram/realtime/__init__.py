"""Realtime infrastructure (Socket.IO).

One Socket.IO server serves the whole project; the chat gateway is mounted on
its ``/chat`` namespace.
"""
