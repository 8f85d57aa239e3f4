"""Integration adapters for daybrief.

Adapters implement the core ports on top of Telethon, httpx, and the local
filesystem.
"""
