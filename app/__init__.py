"""FastTrack: a personal fasting tracker.

``app.server`` wires the HTTP API, ``app.main`` is the ASGI entry point and
``app.client`` holds the live timer client and the ``fasttrack`` CLI.
"""
