"""Core domain package for bridgestore.

Core holds the records, errors, ports and the enabled-team policy without
any SQL or host-platform code, keeping the mapping rules portable.
"""
