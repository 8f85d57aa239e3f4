"""Core domain package for daybrief.

Core contains the daily scan, summarization policy, report rendering, and
chunking logic without any Telegram, HTTP, or filesystem code, keeping the
business logic portable.
"""
