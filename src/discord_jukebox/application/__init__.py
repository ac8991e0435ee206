"""
Application Layer

Orchestrates domain objects and infrastructure to fulfil user commands.

Structure:
- interfaces/: Port interfaces for infrastructure adapters
- services/: The playback controller, its reply DTOs and the idle monitor
"""
