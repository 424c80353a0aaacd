"""Protocol interfaces for external collaborators."""

from mint_announcer.interfaces.chain import ChainClient, LogStream, RawLog
from mint_announcer.interfaces.chat import ChatClient
from mint_announcer.interfaces.metadata import MetadataLookup

__all__ = ["ChainClient", "LogStream", "RawLog", "ChatClient", "MetadataLookup"]
