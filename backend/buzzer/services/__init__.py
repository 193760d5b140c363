"""Room session services: buzz arbitration and event delivery.

This package holds the room state machine and the channel adapter it
delivers through, keeping Socket.IO concerns out of the core game rules.
"""
