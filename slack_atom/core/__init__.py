# Core module

"""
Core Module - Turns Slack data into feed items.

Key responsibilities:
- Directory caching (LookupCache)
- Slack markup to HTML / plain text (MarkupTranslator)
- Tiny thumbnail reconstruction
- Feed item building and assembly
"""
